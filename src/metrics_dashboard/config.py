"""Configuration management for the metrics dashboard."""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


class AWSConfig(BaseModel):
    """AWS client configuration settings."""

    region: str = Field(default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"))
    access_key_id: Optional[str] = Field(default_factory=lambda: os.getenv("AWS_ACCESS_KEY"))
    secret_access_key: Optional[str] = Field(default_factory=lambda: os.getenv("AWS_SECRET_KEY"))
    max_attempts: int = Field(default_factory=lambda: int(os.getenv("AWS_MAX_ATTEMPTS", "5")))
    retry_mode: str = Field(default_factory=lambda: os.getenv("AWS_RETRY_MODE", "adaptive"))

    @property
    def has_static_credentials(self) -> bool:
        """True when both halves of a static key pair are configured."""
        return bool(self.access_key_id and self.secret_access_key)


class ResourceConfig(BaseModel):
    """Identifiers of the monitored resources."""

    ec2_instance_id: str = Field(default_factory=lambda: os.getenv("EC2_INSTANCE_ID", ""))
    rds_instance_id: str = Field(default_factory=lambda: os.getenv("RDS_INSTANCE_ID", ""))
    s3_bucket_name: str = Field(default_factory=lambda: os.getenv("S3_BUCKET_NAME", ""))
    lambda_function_name: str = Field(default_factory=lambda: os.getenv("LAMBDA_FUNCTION_NAME", ""))

    def identifier_for(self, resource: str) -> str:
        """
        Get the configured identifier for a resource kind.

        Args:
            resource: Resource kind value ('ec2', 'rds', 's3', 'lambda')

        Returns:
            Configured identifier, or an empty string when unset.
        """
        mapping = {
            "ec2": self.ec2_instance_id,
            "rds": self.rds_instance_id,
            "s3": self.s3_bucket_name,
            "lambda": self.lambda_function_name,
        }
        return mapping.get(str(resource), "")


class DashboardConfig(BaseModel):
    """Query window and refresh settings."""

    window_hours: Optional[int] = Field(default_factory=lambda: _optional_int("DASHBOARD_WINDOW_HOURS"))
    period: Optional[int] = Field(default_factory=lambda: _optional_int("DASHBOARD_PERIOD"))
    refresh_seconds: int = Field(default_factory=lambda: int(os.getenv("DASHBOARD_REFRESH_SECONDS", "300")))
    time_format: str = Field(default_factory=lambda: os.getenv("DASHBOARD_TIME_FORMAT", "%H:%M:%S"))


class Config(BaseModel):
    """Main configuration object."""

    aws: AWSConfig = Field(default_factory=AWSConfig)
    resources: ResourceConfig = Field(default_factory=ResourceConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)

    # Project settings
    project_name: str = "aws-metrics-dashboard"
    environment: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "dev"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


# Global configuration instance
config = Config()
