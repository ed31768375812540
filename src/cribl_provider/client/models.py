"""Wire models mirroring the Cribl management API resource shapes."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class WireModel(BaseModel):
    """Base for JSON bodies: camelCase on the wire, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_body(self) -> dict[str, Any]:
        """Return the JSON body, omitting every absent optional field."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ItemList(WireModel, Generic[T]):
    """Envelope returned by every collection and item endpoint."""

    count: int | None = None
    items: list[T] = Field(default_factory=list)


# -- Auth / system -------------------------------------------------------------


class LoginInfo(WireModel):
    username: str
    password: str


class AuthToken(WireModel):
    token: str
    force_password_change: bool | None = None


class SystemInfo(WireModel):
    hostname: str = ""
    build: dict[str, Any] = Field(default_factory=dict, alias="BUILD")


class Build(BaseModel):
    """Read-only build snapshot reported by ``/system/info``."""

    hostname: str
    version: str
    branch: str

    @classmethod
    def from_system_info(cls, info: SystemInfo) -> Build:
        return cls(
            hostname=info.hostname,
            version=str(info.build.get("VERSION", "")),
            branch=str(info.build.get("BRANCH", "")),
        )


# -- Pipelines -----------------------------------------------------------------


class PipelineConf(WireModel):
    async_func_timeout: int | None = None
    description: str | None = None
    streamtags: list[str] | None = None
    output: str | None = None
    functions: list[dict[str, Any]] | None = None


class Pipeline(WireModel):
    id: str
    conf: PipelineConf = Field(default_factory=PipelineConf)


# -- S3 output -----------------------------------------------------------------


class OutputS3Type(StrEnum):
    S3 = "s3"


class OutputS3Format(StrEnum):
    JSON = "json"
    RAW = "raw"
    PARQUET = "parquet"


class OutputS3Compress(StrEnum):
    NONE = "none"
    GZIP = "gzip"


class OutputS3CompressionLevel(StrEnum):
    BEST_SPEED = "best_speed"
    NORMAL = "normal"
    BEST_COMPRESSION = "best_compression"


class Backpressure(StrEnum):
    BLOCK = "block"
    DROP = "drop"


class AwsAuthenticationMethod(StrEnum):
    AUTO = "auto"
    MANUAL = "manual"
    SECRET = "secret"


class SignatureVersion(StrEnum):
    V2 = "v2"
    V4 = "v4"


class ObjectACL(StrEnum):
    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    AWS_EXEC_READ = "aws-exec-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


class StorageClass(StrEnum):
    STANDARD = "STANDARD"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    STANDARD_IA = "STANDARD_IA"
    ONEZONE_IA = "ONEZONE_IA"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    GLACIER = "GLACIER"
    GLACIER_IR = "GLACIER_IR"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"


class ServerSideEncryption(StrEnum):
    AES256 = "AES256"
    AWS_KMS = "aws:kms"


class ParquetVersion(StrEnum):
    PARQUET_1_0 = "PARQUET_1_0"
    PARQUET_2_4 = "PARQUET_2_4"
    PARQUET_2_6 = "PARQUET_2_6"


class ParquetDataPageVersion(StrEnum):
    DATA_PAGE_V1 = "DATA_PAGE_V1"
    DATA_PAGE_V2 = "DATA_PAGE_V2"


class OutputS3(WireModel):
    id: str | None = None
    type: OutputS3Type | None = None
    pipeline: str | None = None
    system_fields: list[str] | None = None
    environment: str | None = None
    streamtags: list[str] | None = None
    description: str | None = None
    # Destination
    bucket: str
    region: str | None = None
    endpoint: str | None = None
    dest_path: str | None = None
    stage_path: str
    add_id_to_stage_path: bool | None = None
    remove_empty_dirs: bool | None = None
    empty_dir_cleanup_sec: float | None = None
    partition_expr: str | None = None
    partitioning_fields: list[str] | None = None
    base_file_name: str | None = None
    file_name_suffix: str | None = None
    # Format
    format: OutputS3Format | None = None
    compress: OutputS3Compress | None = None
    compression_level: OutputS3CompressionLevel | None = None
    header_line: str | None = None
    automatic_schema: bool | None = None
    parquet_version: ParquetVersion | None = None
    parquet_data_page_version: ParquetDataPageVersion | None = None
    parquet_row_group_length: float | None = None
    parquet_page_size: str | None = None
    should_log_invalid_rows: bool | None = None
    enable_statistics: bool | None = None
    enable_write_page_index: bool | None = None
    enable_page_checksum: bool | None = None
    # Files and backpressure
    max_file_size_mb: float | None = Field(default=None, alias="maxFileSizeMB")
    max_file_open_time_sec: float | None = None
    max_file_idle_time_sec: float | None = None
    max_open_files: float | None = None
    max_concurrent_file_parts: float | None = None
    max_closing_files_to_backpressure: float | None = None
    max_retry_num: float | None = None
    write_high_water_mark: float | None = None
    on_backpressure: Backpressure | None = None
    on_disk_full_backpressure: Backpressure | None = None
    deadletter_enabled: bool | None = None
    deadletter_path: str | None = None
    # Authentication
    aws_authentication_method: AwsAuthenticationMethod | None = None
    aws_api_key: str | None = None
    aws_secret_key: str | None = None
    aws_secret: str | None = None
    assume_role_arn: str | None = None
    assume_role_external_id: str | None = None
    enable_assume_role: bool | None = None
    duration_seconds: float | None = None
    signature_version: SignatureVersion | None = None
    reuse_connections: bool | None = None
    reject_unauthorized: bool | None = None
    verify_permissions: bool | None = None
    # Object storage
    object_acl: ObjectACL | None = Field(default=None, alias="objectACL")
    storage_class: StorageClass | None = None
    server_side_encryption: ServerSideEncryption | None = None
    kms_key_id: str | None = None


# -- Datagen input -------------------------------------------------------------


class InputDatagenType(StrEnum):
    DATAGEN = "datagen"


class DatagenSample(WireModel):
    events_per_sec: float
    sample: str


class InputDatagen(WireModel):
    id: str | None = None
    type: InputDatagenType = InputDatagenType.DATAGEN
    description: str | None = None
    environment: str | None = None
    disabled: bool | None = None
    pipeline: str | None = None
    send_to_routes: bool | None = None
    pq_enabled: bool | None = None
    streamtags: list[str] | None = None
    samples: list[DatagenSample] | None = None
