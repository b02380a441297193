"""Validation and construction of cluster creation requests."""

from __future__ import annotations

from dataclasses import dataclass, field

from kninfra.gke.addon import AddonsConfig, get_addons_config

DEFAULT_GKE_VERSION = "latest"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
DEFAULT_POOL_NAME = "default-pool"
DEFAULT_MASTER_USERNAME = "admin"


@dataclass
class NodePoolAutoscaling:
    """Autoscaling bounds of a node pool."""

    enabled: bool = False
    min_node_count: int = 0
    max_node_count: int = 0


@dataclass
class NodeConfig:
    """Machine settings of the nodes in a pool."""

    machine_type: str = ""
    oauth_scopes: list[str] = field(default_factory=list)
    service_account: str = ""


@dataclass
class NodePool:
    """A group of identically configured nodes."""

    name: str = ""
    initial_node_count: int = 0
    autoscaling: NodePoolAutoscaling | None = None
    config: NodeConfig | None = None


@dataclass
class MasterAuth:
    """Authentication settings of the cluster master."""

    username: str = ""


@dataclass
class WorkloadIdentityConfig:
    """Workload Identity settings of a cluster."""

    workload_pool: str = ""


@dataclass
class ReleaseChannel:
    """The release channel a cluster is subscribed to."""

    channel: str = ""


@dataclass
class Cluster:
    """A cluster as described to, or reported by, the container service."""

    name: str = ""
    location: str = ""
    status: str = ""
    node_pools: list[NodePool] = field(default_factory=list)
    addons_config: AddonsConfig | None = None
    master_auth: MasterAuth | None = None
    workload_identity_config: WorkloadIdentityConfig | None = None
    release_channel: ReleaseChannel | None = None
    initial_cluster_version: str = ""


@dataclass
class CreateClusterRequest:
    """A request to create a cluster."""

    cluster: Cluster


@dataclass
class Request:
    """All settings collected for cluster creation."""

    gcp_credential_file: str = ""
    project: str = ""
    gke_version: str = ""
    release_channel: str = ""
    cluster_name: str = ""
    min_nodes: int = 0
    max_nodes: int = 0
    node_type: str = ""
    region: str = ""
    zone: str = ""
    addons: list[str] = field(default_factory=list)
    enable_workload_identity: bool = False
    service_account: str = ""

    def deep_copy(self) -> Request:
        """Return a copy of the request; the credential file is not carried over."""
        return Request(
            project=self.project,
            gke_version=self.gke_version,
            release_channel=self.release_channel,
            cluster_name=self.cluster_name,
            min_nodes=self.min_nodes,
            max_nodes=self.max_nodes,
            node_type=self.node_type,
            region=self.region,
            zone=self.zone,
            addons=list(self.addons),
            enable_workload_identity=self.enable_workload_identity,
            service_account=self.service_account,
        )


def _validate(request: Request) -> None:
    if not request.cluster_name:
        raise ValueError("cluster name cannot be empty")
    if request.min_nodes <= 0:
        raise ValueError("min nodes must be larger than 1")
    if request.min_nodes > request.max_nodes:
        raise ValueError("min nodes cannot be larger than max nodes")
    if not request.node_type:
        raise ValueError("node type cannot be empty")
    if request.enable_workload_identity and not request.project:
        raise ValueError("project cannot be empty if you want Workload Identity")
    if request.gke_version and request.release_channel:
        raise ValueError(
            "can only specify one of GKE version or release channel (not both)"
        )


def new_create_cluster_request(request: Request) -> CreateClusterRequest:
    """Validate ``request`` and build the matching cluster creation request."""
    _validate(request)

    pool = NodePool(
        name=DEFAULT_POOL_NAME,
        initial_node_count=request.min_nodes,
        autoscaling=NodePoolAutoscaling(
            enabled=True,
            min_node_count=request.min_nodes,
            max_node_count=request.max_nodes,
        ),
        config=NodeConfig(
            machine_type=request.node_type,
            oauth_scopes=[CLOUD_PLATFORM_SCOPE],
        ),
    )
    cluster = Cluster(
        name=request.cluster_name,
        node_pools=[pool],
        # Installing addons at creation time is far cheaper than afterwards.
        addons_config=get_addons_config(request.addons),
        master_auth=MasterAuth(username=DEFAULT_MASTER_USERNAME),
    )

    if request.enable_workload_identity:
        cluster.workload_identity_config = WorkloadIdentityConfig(
            workload_pool=request.project + ".svc.id.goog"
        )
    if request.service_account:
        assert pool.config is not None
        pool.config.service_account = request.service_account

    if request.release_channel:
        cluster.release_channel = ReleaseChannel(channel=request.release_channel)
    elif request.gke_version:
        cluster.initial_cluster_version = request.gke_version
    else:
        # The service does not default to the latest version on its own.
        cluster.initial_cluster_version = DEFAULT_GKE_VERSION

    return CreateClusterRequest(cluster=cluster)