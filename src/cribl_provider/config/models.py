"""Pydantic configuration models for the provider and its declared resources."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from cribl_provider.client.models import (
    AwsAuthenticationMethod,
    Backpressure,
    InputDatagenType,
    ObjectACL,
    OutputS3Compress,
    OutputS3CompressionLevel,
    OutputS3Format,
    OutputS3Type,
    ParquetDataPageVersion,
    ParquetVersion,
    ServerSideEncryption,
    SignatureVersion,
    StorageClass,
)

BASE_URL_ENV = "CRIBL_URL"


class ResourceKind(StrEnum):
    """Resource types managed by the provider."""

    PIPELINE = "pipeline"
    OUTPUT_S3 = "output_s3"
    INPUT_DATAGEN = "input_datagen"


ResourceId = Annotated[str, Field(min_length=1)]


class ProviderConfig(BaseModel):
    """Connection settings for the Cribl management API."""

    # Falls back to the CRIBL_URL environment variable when unset.
    base_url: str | None = None
    username: str | None = None
    password: SecretStr | None = None
    # A pre-issued bearer token skips the login exchange.
    token: SecretStr | None = None
    api_prefix: str = "/api/v1"
    timeout_seconds: float = Field(default=30.0, gt=0)
    verify_tls: bool = True
    ready_max_attempts: int = Field(default=5, ge=1)
    ready_wait_seconds: float = Field(default=2.0, gt=0)

    @model_validator(mode="after")
    def check_credentials(self) -> Self:
        """Username and password are only meaningful together."""
        if (self.username is None) != (self.password is None):
            msg = "username and password must be set together"
            raise ValueError(msg)
        return self


# -- Resources -----------------------------------------------------------------


class PipelineResource(BaseModel, extra="forbid"):
    """Declared state of a processing pipeline."""

    id: ResourceId
    description: str | None = None
    timeout_ms: int = Field(ge=0)
    output: str
    tags: list[str] | None = None


class OutputS3Resource(BaseModel, extra="forbid"):
    """Declared state of an Amazon S3 destination."""

    id: ResourceId
    default_id: str
    type: OutputS3Type | None = OutputS3Type.S3
    description: str | None = None
    environment: str | None = None
    pipeline: str | None = None
    stream_tags: list[str] | None = None
    system_fields: list[str] | None = None
    # Destination
    bucket: str
    region: str | None = None
    endpoint: str | None = None
    dest_path: str | None = None
    stage_path: str = "$CRIBL_HOME/state/outputs/staging"
    add_id_to_stage_path: bool | None = None
    remove_empty_dirs: bool | None = None
    empty_dir_cleanup_sec: float | None = Field(default=None, ge=0)
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
    max_file_size_mb: float | None = None
    max_file_open_time_sec: float | None = None
    max_file_idle_time_sec: float | None = None
    max_open_files: float | None = None
    max_concurrent_file_parts: float | None = None
    max_closing_files_to_backpressure: float | None = None
    max_retry_num: float | None = None
    write_high_water_mark: float | None = None
    on_backpressure: Backpressure | None = None
    on_disk_full_backpressure: Backpressure | None = None
    deadletter_enabled: bool
    deadletter_path: str | None = None
    # Authentication
    aws_authentication_method: AwsAuthenticationMethod | None = None
    aws_api_key: SecretStr | None = None
    aws_secret_key: SecretStr | None = None
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
    object_acl: ObjectACL | None = None
    storage_class: StorageClass | None = None
    server_side_encryption: ServerSideEncryption | None = None
    kms_key_id: str | None = None


class DatagenSampleConfig(BaseModel, extra="forbid"):
    events_per_sec: int
    sample: str


class InputDatagenResource(BaseModel, extra="forbid"):
    """Declared state of a datagen (sample data generator) source."""

    id: ResourceId
    type: InputDatagenType = InputDatagenType.DATAGEN
    description: str | None = None
    environment: str | None = None
    disabled: bool
    pipeline: str | None = None
    pq_enabled: bool | None = None
    send_to_routes: bool | None = None
    stream_tags: list[str] | None = None
    samples: list[DatagenSampleConfig] | None = None


ResourceConfig = PipelineResource | OutputS3Resource | InputDatagenResource


class ResourcesDocument(BaseModel, extra="forbid"):
    """Desired state: every resource the provider should manage."""

    pipelines: list[PipelineResource] = Field(default_factory=list)
    outputs_s3: list[OutputS3Resource] = Field(default_factory=list)
    inputs_datagen: list[InputDatagenResource] = Field(default_factory=list)

    @field_validator("pipelines", "outputs_s3", "inputs_datagen")
    @classmethod
    def validate_unique_ids(cls, v: list[ResourceConfig]) -> list[ResourceConfig]:
        seen: set[str] = set()
        for resource in v:
            if resource.id in seen:
                msg = f"Duplicate resource id '{resource.id}'"
                raise ValueError(msg)
            seen.add(resource.id)
        return v

    def by_kind(self) -> dict[ResourceKind, list[ResourceConfig]]:
        return {
            ResourceKind.PIPELINE: list(self.pipelines),
            ResourceKind.OUTPUT_S3: list(self.outputs_s3),
            ResourceKind.INPUT_DATAGEN: list(self.inputs_datagen),
        }


MODEL_FOR_KIND: dict[ResourceKind, type[BaseModel]] = {
    ResourceKind.PIPELINE: PipelineResource,
    ResourceKind.OUTPUT_S3: OutputS3Resource,
    ResourceKind.INPUT_DATAGEN: InputDatagenResource,
}
