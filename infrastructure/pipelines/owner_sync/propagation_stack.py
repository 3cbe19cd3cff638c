"""Owner propagation stack: accounts stream -> Lambda -> contacts table."""

from __future__ import annotations

from aws_cdk import (
    Stack,
    aws_cloudwatch as cw,
    aws_lambda as lambda_,
    aws_lambda_event_sources as lambda_event_sources,
    aws_logs as logs,
    Duration,
    CfnOutput,
)
from aws_cdk.aws_lambda_python_alpha import BundlingOptions, PythonFunction, PythonLayerVersion
from constructs import Construct

from infrastructure.config.types import EnvironmentConfig


class OwnerPropagationStack(Stack):
    """Lambda that keeps contact owners aligned with their account's owner."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: EnvironmentConfig,
        shared_storage_stack,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config
        self.shared_storage = shared_storage_stack
        self.metrics_namespace: str = str(self.config.get("metrics_namespace", "OwnerSync/Propagation") or "")

        self.common_layer = self._create_common_layer()
        self.propagation_function = self._create_propagation_function()
        self._grant_table_access()
        self._create_stream_trigger()
        self._create_alarms()
        self._create_outputs()

    def _create_common_layer(self) -> lambda_.LayerVersion:
        """Create Common Layer for shared models, stores and the propagation core."""
        return PythonLayerVersion(
            self,
            "CommonLayer",
            entry="src/lambda/layers/common",
            layer_version_name=f"{self.env_name}-owner-sync-common-layer",
            description="Owner propagation models, stores and core",
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_12],
            bundling=BundlingOptions(
                command=[
                    "bash",
                    "-c",
                    "set -euxo pipefail; "
                    "mkdir -p /asset-output/python; "
                    "cp -R /asset-input/python/. /asset-output/python/; "
                    "if [ -f requirements.txt ]; then pip install -q -r requirements.txt -t /asset-output/python; fi",
                ],
                asset_excludes=["tests", "__pycache__", "*.pyc"],
            ),
        )

    def _create_propagation_function(self) -> lambda_.IFunction:
        storage = self.shared_storage
        return PythonFunction(
            self,
            "OwnerPropagationFunction",
            function_name=f"{self.env_name}-owner-propagation",
            runtime=lambda_.Runtime.PYTHON_3_12,
            entry="src/lambda/functions/owner_propagation",
            index="handler.py",
            handler="main",
            memory_size=int(self.config.get("lambda_memory", 512)),
            timeout=Duration.seconds(int(self.config.get("lambda_timeout", 300))),
            log_retention=self._log_retention(),
            tracing=lambda_.Tracing.ACTIVE if self.config.get("enable_xray_tracing") else lambda_.Tracing.DISABLED,
            layers=[self.common_layer],
            environment={
                "ENVIRONMENT": self.env_name,
                "CONTACTS_TABLE": storage.contacts_table.table_name,
                "CONTACTS_ACCOUNT_INDEX": storage.contacts_account_index,
                "ERROR_LOG_TABLE": storage.error_log_table.table_name,
                "CHUNK_SIZE": str(int(self.config.get("propagation_chunk_size", 9000))),
                "ROW_LIMIT": str(int(self.config.get("propagation_row_limit", 10000))),
                "METRICS_NAMESPACE": self.metrics_namespace,
                "LOG_LEVEL": str(self.config.get("log_level", "INFO")),
            },
        )

    def _grant_table_access(self) -> None:
        storage = self.shared_storage
        storage.contacts_table.grant_read_write_data(self.propagation_function)
        # DescribeTable backs the error log capability check.
        storage.error_log_table.grant_write_data(self.propagation_function)
        storage.error_log_table.grant(self.propagation_function, "dynamodb:DescribeTable")

    def _create_stream_trigger(self) -> None:
        self.propagation_function.add_event_source(
            lambda_event_sources.DynamoEventSource(
                self.shared_storage.accounts_table,
                starting_position=lambda_.StartingPosition.LATEST,
                batch_size=int(self.config.get("propagation_trigger_batch_size", 100)),
                max_batching_window=Duration.seconds(
                    max(0, int(self.config.get("propagation_trigger_max_batching_window_seconds", 5)))
                ),
                retry_attempts=int(self.config.get("propagation_trigger_retry_attempts", 2)),
                filters=[lambda_.FilterCriteria.filter({"eventName": lambda_.FilterRule.is_equal("MODIFY")})],
            )
        )

    def _create_alarms(self) -> None:
        cw.Alarm(
            self,
            "OwnerPropagationErrorsAlarm",
            metric=self.propagation_function.metric_errors(period=Duration.minutes(5)),
            threshold=1,
            evaluation_periods=1,
            datapoints_to_alarm=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            alarm_name=f"{self.env_name}-owner-propagation-errors",
            alarm_description="Owner propagation Lambda raised an unhandled error",
        )

        if not self.metrics_namespace:
            return

        cw.Alarm(
            self,
            "ContactsFailedAlarm",
            metric=cw.Metric(
                namespace=self.metrics_namespace,
                metric_name="ContactsFailed",
                dimensions_map={"Environment": self.env_name},
                statistic="Sum",
                period=Duration.minutes(5),
            ),
            threshold=float(self.config.get("contacts_failed_alarm_threshold", 1)),
            evaluation_periods=1,
            datapoints_to_alarm=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
            alarm_name=f"{self.env_name}-owner-propagation-contacts-failed",
            alarm_description="Contact owner updates failed; see the error log table",
        )

    def _create_outputs(self) -> None:
        CfnOutput(
            self,
            "OwnerPropagationFunctionName",
            value=self.propagation_function.function_name,
            description="Owner propagation Lambda function name",
        )

    def _log_retention(self) -> logs.RetentionDays:
        """Map integer days from config to CloudWatch Logs retention enum."""
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            90: logs.RetentionDays.THREE_MONTHS,
        }
        return retention_map.get(self.config.get("log_retention_days", 14), logs.RetentionDays.TWO_WEEKS)
