"""CloudWatch metric query engine for EC2, RDS, S3 and Lambda dashboards."""

__version__ = "0.1.0"
