"""Pipeline stage that uploads files to S3 and forwards them downstream."""

from s3_stage.config import StageConfig, check_config
from s3_stage.context import CancellationToken, StageContext
from s3_stage.models import ACL, FileInfo, FileItem, Region
from s3_stage.stage import PutStage, put
from s3_stage.streams import Channel

__all__ = [
    "ACL",
    "CancellationToken",
    "Channel",
    "FileInfo",
    "FileItem",
    "PutStage",
    "Region",
    "StageConfig",
    "StageContext",
    "check_config",
    "put",
]
