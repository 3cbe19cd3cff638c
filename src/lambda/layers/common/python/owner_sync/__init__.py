"""Owner propagation layer: models, stores and the propagation core."""
