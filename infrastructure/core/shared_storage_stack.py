"""Shared storage for owner propagation: accounts, contacts and the error log."""

from aws_cdk import (
    Stack,
    aws_dynamodb as dynamodb,
    RemovalPolicy,
    CfnOutput,
)
from constructs import Construct

from infrastructure.config.types import EnvironmentConfig

CONTACTS_ACCOUNT_INDEX = "account_id-index"


class SharedStorageStack(Stack):
    """DynamoDB tables shared by the owner propagation pipeline."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: EnvironmentConfig,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config

        self.accounts_table = self._create_accounts_table()
        self.contacts_table = self._create_contacts_table()
        self.error_log_table = self._create_error_log_table()
        self.contacts_account_index = CONTACTS_ACCOUNT_INDEX

        self._create_outputs()

    def _removal_policy(self) -> RemovalPolicy:
        cfg_policy = str(self.config.get("removal_policy", "retain") or "retain").lower()
        if cfg_policy == "destroy":
            return RemovalPolicy.DESTROY
        return RemovalPolicy.RETAIN

    def _table_name(self, key: str, suffix: str) -> str:
        raw_name = str(self.config.get(key) or "").strip()
        if raw_name:
            return raw_name
        return f"{self.env_name}-{suffix}"

    def _create_accounts_table(self) -> dynamodb.Table:
        """Accounts table; its stream feeds the propagation Lambda."""
        table = dynamodb.Table(
            self,
            "AccountsTable",
            table_name=self._table_name("accounts_table_name", "accounts"),
            partition_key=dynamodb.Attribute(name="account_id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            stream=dynamodb.StreamViewType.NEW_AND_OLD_IMAGES,
            point_in_time_recovery=bool(self.config.get("enable_point_in_time_recovery", False)),
        )
        table.apply_removal_policy(self._removal_policy())
        return table

    def _create_contacts_table(self) -> dynamodb.Table:
        table = dynamodb.Table(
            self,
            "ContactsTable",
            table_name=self._table_name("contacts_table_name", "contacts"),
            partition_key=dynamodb.Attribute(name="contact_id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=bool(self.config.get("enable_point_in_time_recovery", False)),
        )
        table.add_global_secondary_index(
            index_name=CONTACTS_ACCOUNT_INDEX,
            partition_key=dynamodb.Attribute(name="account_id", type=dynamodb.AttributeType.STRING),
            sort_key=dynamodb.Attribute(name="contact_id", type=dynamodb.AttributeType.STRING),
            projection_type=dynamodb.ProjectionType.INCLUDE,
            non_key_attributes=["owner_id"],
        )
        table.apply_removal_policy(self._removal_policy())
        return table

    def _create_error_log_table(self) -> dynamodb.Table:
        """Append-only error log; entries are never updated or expired by the pipeline."""
        table = dynamodb.Table(
            self,
            "ErrorLogTable",
            table_name=self._table_name("error_log_table_name", "owner-sync-error-log"),
            partition_key=dynamodb.Attribute(name="log_id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
        )
        table.apply_removal_policy(self._removal_policy())
        return table

    def _create_outputs(self) -> None:
        CfnOutput(
            self,
            "AccountsTableName",
            value=self.accounts_table.table_name,
            description="Accounts DynamoDB table name",
        )

        CfnOutput(
            self,
            "ContactsTableName",
            value=self.contacts_table.table_name,
            description="Contacts DynamoDB table name",
        )

        CfnOutput(
            self,
            "ErrorLogTableName",
            value=self.error_log_table.table_name,
            description="Owner propagation error log table name",
        )
