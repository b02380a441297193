"""Conversion of addon names into a cluster addons configuration."""

from __future__ import annotations

from dataclasses import dataclass

ISTIO = "istio"
HPA = "horizontalpodautoscaling"
HLB = "httploadbalancing"
CLOUD_RUN = "cloudrun"

SUPPORTED_ADDONS = (ISTIO, HPA, HLB, CLOUD_RUN)


@dataclass
class AddonsConfig:
    """Addon settings for a cluster; ``None`` means the addon is not configured."""

    istio_config: dict[str, bool] | None = None
    horizontal_pod_autoscaling: dict[str, bool] | None = None
    http_load_balancing: dict[str, bool] | None = None
    cloud_run_config: dict[str, bool] | None = None


_FIELDS = {
    ISTIO: "istio_config",
    HPA: "horizontal_pod_autoscaling",
    HLB: "http_load_balancing",
    CLOUD_RUN: "cloud_run_config",
}


def get_addons_config(addons: list[str] | tuple[str, ...] | None) -> AddonsConfig:
    """Build an enabled addons configuration from addon names (case-insensitive)."""
    config = AddonsConfig()
    for name in addons or ():
        field = _FIELDS.get(name.lower())
        if field is None:
            supported = " ".join(f'"{a}"' for a in SUPPORTED_ADDONS)
            raise ValueError(
                f'addon type "{name}" not supported. Has to be one of: [{supported}]'
            )
        setattr(config, field, {"disabled": False})
    return config