"""Static RDS instance attributes shown beside the RDS charts."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel

from ..exceptions import ConfigMissing, FetchFailure
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DBInstanceInfo(BaseModel):
    """Subset of DescribeDBInstances output rendered as an info table."""

    identifier: str
    engine: str = ""
    engine_version: str = ""
    instance_class: str = ""
    allocated_storage_gb: Optional[int] = None
    endpoint_address: Optional[str] = None
    endpoint_port: Optional[int] = None
    status: str = ""
    created: Optional[datetime] = None
    backup_retention_days: Optional[int] = None

    @classmethod
    def from_api(cls, instance: Dict[str, Any]) -> "DBInstanceInfo":
        endpoint = instance.get("Endpoint") or {}
        return cls(
            identifier=instance.get("DBInstanceIdentifier", ""),
            engine=instance.get("Engine", ""),
            engine_version=instance.get("EngineVersion", ""),
            instance_class=instance.get("DBInstanceClass", ""),
            allocated_storage_gb=instance.get("AllocatedStorage"),
            endpoint_address=endpoint.get("Address"),
            endpoint_port=endpoint.get("Port"),
            status=instance.get("DBInstanceStatus", ""),
            created=instance.get("InstanceCreateTime"),
            backup_retention_days=instance.get("BackupRetentionPeriod"),
        )

    def as_rows(self) -> List[Tuple[str, str]]:
        """Label/value rows for display; unknown values render as empty strings."""

        def text(value: Any) -> str:
            return "" if value is None else str(value)

        storage = f"{self.allocated_storage_gb} GB" if self.allocated_storage_gb is not None else ""
        retention = f"{self.backup_retention_days} days" if self.backup_retention_days is not None else ""
        created = self.created.strftime("%Y-%m-%d") if self.created else ""
        return [
            ("Engine", f"{self.engine} {self.engine_version}".strip()),
            ("Instance Class", self.instance_class),
            ("Storage", storage),
            ("Endpoint", text(self.endpoint_address)),
            ("Port", text(self.endpoint_port)),
            ("Status", self.status),
            ("Created", created),
            ("Backup Retention", retention),
        ]


def describe_db_instance(rds_client: Any, identifier: str) -> DBInstanceInfo:
    """
    Describe one RDS instance.

    Args:
        rds_client: Boto3 RDS client
        identifier: DB instance identifier

    Returns:
        DBInstanceInfo for the instance.

    Raises:
        ConfigMissing: If identifier is empty.
        FetchFailure: If the describe call fails or finds no instance.
    """
    if not identifier:
        raise ConfigMissing("DBInstanceIdentifier")

    request_id = f"describe-{identifier}"
    try:
        response = rds_client.describe_db_instances(DBInstanceIdentifier=identifier)
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code")
        logger.error(f"Failed to describe RDS instance {identifier}: {e}")
        raise FetchFailure(request_id, str(e), error_code=error_code) from e
    except BotoCoreError as e:
        logger.error(f"Failed to describe RDS instance {identifier}: {e}")
        raise FetchFailure(request_id, str(e)) from e

    instances = response.get("DBInstances", [])
    if not instances:
        raise FetchFailure(request_id, f"No RDS instance named {identifier}", error_code="DBInstanceNotFound")

    info = DBInstanceInfo.from_api(instances[0])
    logger.debug(f"RDS instance {identifier}: {info.engine} {info.engine_version}, {info.status}")
    return info
