"""Unit tests for provider and resource configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cribl_provider.client.models import OutputS3Format, StorageClass
from cribl_provider.config.models import (
    InputDatagenResource,
    OutputS3Resource,
    PipelineResource,
    ProviderConfig,
    ResourceKind,
    ResourcesDocument,
)


class TestProviderConfig:
    def test_defaults(self):
        cfg = ProviderConfig()
        assert cfg.base_url is None
        assert cfg.api_prefix == "/api/v1"
        assert cfg.timeout_seconds == 30.0
        assert cfg.verify_tls is True

    def test_password_is_secret(self):
        cfg = ProviderConfig(username="admin", password="hunter2")
        assert "hunter2" not in repr(cfg)
        assert cfg.password is not None
        assert cfg.password.get_secret_value() == "hunter2"

    def test_username_without_password_rejected(self):
        with pytest.raises(ValidationError, match="set together"):
            ProviderConfig(username="admin")

    def test_password_without_username_rejected(self):
        with pytest.raises(ValidationError, match="set together"):
            ProviderConfig(password="pw")

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ProviderConfig(timeout_seconds=0)


class TestPipelineResource:
    def test_required_fields(self):
        with pytest.raises(ValidationError):
            PipelineResource(id="p1", output="default")

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            PipelineResource(id="", timeout_ms=1000, output="default")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PipelineResource(id="p1", timeout_ms=1, output="o", functions=[])

    def test_empty_and_absent_tags_differ(self):
        absent = PipelineResource(id="p1", timeout_ms=1, output="o")
        empty = PipelineResource(id="p1", timeout_ms=1, output="o", tags=[])
        assert absent.tags is None
        assert empty.tags == []
        assert absent != empty


class TestOutputS3Resource:
    def test_minimal(self):
        out = OutputS3Resource(
            id="s3", default_id="s3", bucket="b", deadletter_enabled=False
        )
        assert out.type == "s3"
        assert out.stage_path == "$CRIBL_HOME/state/outputs/staging"
        assert out.format is None

    def test_enum_values_validated(self):
        out = OutputS3Resource(
            id="s3",
            default_id="s3",
            bucket="b",
            deadletter_enabled=False,
            format="parquet",
            storage_class="GLACIER_IR",
        )
        assert out.format == OutputS3Format.PARQUET
        assert out.storage_class == StorageClass.GLACIER_IR

    def test_unknown_enum_rejected(self):
        with pytest.raises(ValidationError):
            OutputS3Resource(
                id="s3",
                default_id="s3",
                bucket="b",
                deadletter_enabled=False,
                compress="brotli",
            )

    def test_deadletter_enabled_required(self):
        with pytest.raises(ValidationError):
            OutputS3Resource(id="s3", default_id="s3", bucket="b")


class TestInputDatagenResource:
    def test_zero_rate_allowed(self):
        gen = InputDatagenResource(
            id="gen",
            disabled=False,
            samples=[{"sample": "a.log", "events_per_sec": 0}],
        )
        assert gen.samples is not None
        assert gen.samples[0].events_per_sec == 0

    def test_type_default(self):
        gen = InputDatagenResource(id="gen", disabled=True)
        assert gen.type == "datagen"


class TestResourcesDocument:
    def test_empty_document(self):
        doc = ResourcesDocument()
        assert doc.by_kind() == {kind: [] for kind in ResourceKind}

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate resource id 'p1'"):
            ResourcesDocument(
                pipelines=[
                    {"id": "p1", "timeout_ms": 1, "output": "o"},
                    {"id": "p1", "timeout_ms": 2, "output": "o"},
                ]
            )

    def test_same_id_across_kinds_allowed(self):
        doc = ResourcesDocument(
            pipelines=[{"id": "main", "timeout_ms": 1, "output": "o"}],
            inputs_datagen=[{"id": "main", "disabled": False}],
        )
        assert [r.id for r in doc.by_kind()[ResourceKind.PIPELINE]] == ["main"]

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            ResourcesDocument.model_validate({"routes": []})
