"""Configuration management for dxftopo.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- SamplingConfig: Curve sampling resolution
- GeometryConfig: Endpoint tolerance and node merging
- TopologyConfig: Area metric and contour strategies
- ValidationConfig: Manufacturability checks
- ProcessingConfig: Batch processing settings
- LoggingConfig: Logging settings
- TopologySettings: Main application settings
"""

from dxftopo.config.settings import (
    AreaMetric,
    ContourStrategyName,
    GeometryConfig,
    LoggingConfig,
    NodeMergeMode,
    ProcessingConfig,
    SamplingConfig,
    TopologyConfig,
    TopologySettings,
    ValidationConfig,
    get_default_settings,
)

__all__ = [
    "AreaMetric",
    "ContourStrategyName",
    "GeometryConfig",
    "LoggingConfig",
    "NodeMergeMode",
    "ProcessingConfig",
    "SamplingConfig",
    "TopologyConfig",
    "TopologySettings",
    "ValidationConfig",
    "get_default_settings",
]
