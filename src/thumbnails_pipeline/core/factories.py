"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3

from .exceptions import ConfigurationError
from .gateways import S3ObjectStoreGateway
from .image_utils import SupportedExtensions, always_eligible
from .models import PipelineConfig, PresetRegistry
from .presets import default_registry
from .protocols import (
    EligibilityPredicate,
    LoggerProtocol,
    ObjectStoreGateway,
    ResizeOperation,
    S3ClientProtocol,
)
from .resizers import create_resizer
from .services import BatchProcessor, DerivativePipeline


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class PipelineFactory:
    """Factory for wiring the derivative pipeline and batch processor."""

    @staticmethod
    def create_pipeline(
        config: PipelineConfig,
        registry: Optional[PresetRegistry] = None,
        s3_client: Optional[S3ClientProtocol] = None,
        gateway: Optional[ObjectStoreGateway] = None,
        resizer: Optional[ResizeOperation] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> DerivativePipeline:
        """Create a derivative pipeline, building default collaborators as needed."""
        if gateway is None:
            if s3_client is None:
                s3_client = S3ClientFactory.create_s3_client()
            gateway = S3ObjectStoreGateway(s3_client)

        if resizer is None:
            try:
                resizer = create_resizer(config.resizer)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

        return DerivativePipeline(
            gateway=gateway,
            resizer=resizer,
            registry=registry if registry is not None else default_registry(),
            config=config,
            logger=logger,
        )

    @staticmethod
    def create_eligibility(config: PipelineConfig) -> EligibilityPredicate:
        """Restrict to configured extensions, or accept everything."""
        if config.supported_extensions:
            return SupportedExtensions(config.supported_extensions)
        return always_eligible

    @classmethod
    def create_batch_processor(
        cls,
        config: PipelineConfig,
        registry: Optional[PresetRegistry] = None,
        s3_client: Optional[S3ClientProtocol] = None,
        gateway: Optional[ObjectStoreGateway] = None,
        resizer: Optional[ResizeOperation] = None,
        is_eligible: Optional[EligibilityPredicate] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> BatchProcessor:
        """Create a fully configured batch processor."""
        pipeline = cls.create_pipeline(
            config,
            registry=registry,
            s3_client=s3_client,
            gateway=gateway,
            resizer=resizer,
            logger=logger,
        )
        return BatchProcessor(
            pipeline,
            is_eligible=is_eligible or cls.create_eligibility(config),
            staging_dir=config.staging_dir,
            logger=logger,
        )
