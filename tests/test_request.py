import pytest

from kninfra.gke.request import (
    CLOUD_PLATFORM_SCOPE,
    Request,
    new_create_cluster_request,
)

VALID_REQUESTS = [
    Request(
        project="project-a",
        cluster_name="name-a",
        min_nodes=1,
        max_nodes=1,
        node_type="n1-standard-4",
        addons=["Istio"],
    ),
    Request(
        project="project-b",
        cluster_name="name-b",
        min_nodes=10,
        max_nodes=10,
        node_type="n1-standard-8",
        addons=["HorizontalPodAutoscaling", "HttpLoadBalancing", "CloudRun"],
    ),
    Request(
        project="project-b",
        cluster_name="name-b",
        min_nodes=10,
        max_nodes=10,
        node_type="n1-standard-8",
        addons=["HorizontalPodAutoscaling", "HttpLoadBalancing", "CloudRun"],
        release_channel="rapid",
    ),
    Request(
        project="project-g",
        gke_version="1-2-3",
        cluster_name="name-g",
        min_nodes=1,
        max_nodes=1,
        node_type="n1-standard-4",
        enable_workload_identity=True,
    ),
    Request(
        project="project-i",
        gke_version="1-2-3",
        cluster_name="name-i",
        min_nodes=3,
        max_nodes=3,
        node_type="n1-standard-4",
        service_account="sa-i",
    ),
]

INVALID_REQUESTS = [
    Request(
        project="project-b",
        cluster_name="name-b",
        gke_version="1-2-3",
        min_nodes=10,
        max_nodes=10,
        node_type="n1-standard-8",
        addons=["HorizontalPodAutoscaling", "HttpLoadBalancing", "CloudRun"],
        release_channel="rapid",
    ),
    Request(
        project="project-c",
        gke_version="1-2-3",
        min_nodes=1,
        max_nodes=1,
        node_type="n1-standard-4",
    ),
    Request(
        project="project-d",
        gke_version="1-2-3",
        cluster_name="name-d",
        min_nodes=0,
        max_nodes=1,
        node_type="n1-standard-4",
    ),
    Request(
        project="project-e",
        gke_version="1-2-3",
        cluster_name="name-e",
        min_nodes=10,
        max_nodes=1,
        node_type="n1-standard-4",
    ),
    Request(
        project="project-f",
        gke_version="1-2-3",
        cluster_name="name-f",
        min_nodes=1,
        max_nodes=1,
    ),
    Request(
        gke_version="1-2-3",
        cluster_name="name-h",
        min_nodes=3,
        max_nodes=3,
        node_type="n1-standard-4",
        enable_workload_identity=True,
    ),
]


@pytest.mark.parametrize("req", VALID_REQUESTS)
def test_valid_requests_build(req):
    ccr = new_create_cluster_request(req)
    cluster = ccr.cluster
    assert cluster.name == req.cluster_name
    assert len(cluster.node_pools) == 1
    pool = cluster.node_pools[0]
    assert pool.name == "default-pool"
    assert pool.initial_node_count == req.min_nodes
    assert pool.autoscaling.enabled is True
    assert pool.autoscaling.min_node_count == req.min_nodes
    assert pool.autoscaling.max_node_count == req.max_nodes
    assert pool.config.machine_type == req.node_type
    assert pool.config.oauth_scopes == [CLOUD_PLATFORM_SCOPE]
    assert cluster.master_auth.username == "admin"


@pytest.mark.parametrize("req", INVALID_REQUESTS)
def test_invalid_requests_raise(req):
    with pytest.raises(ValueError):
        new_create_cluster_request(req)


def test_error_messages():
    with pytest.raises(ValueError, match="cluster name cannot be empty"):
        new_create_cluster_request(Request(min_nodes=1, max_nodes=1, node_type="n"))
    with pytest.raises(ValueError, match="min nodes cannot be larger than max nodes"):
        new_create_cluster_request(
            Request(cluster_name="c", min_nodes=3, max_nodes=1, node_type="n")
        )


def test_default_version_is_latest():
    ccr = new_create_cluster_request(VALID_REQUESTS[0])
    assert ccr.cluster.initial_cluster_version == "latest"
    assert ccr.cluster.release_channel is None


def test_release_channel_set_instead_of_version():
    ccr = new_create_cluster_request(VALID_REQUESTS[2])
    assert ccr.cluster.release_channel.channel == "rapid"
    assert ccr.cluster.initial_cluster_version == ""


def test_explicit_version_used():
    ccr = new_create_cluster_request(VALID_REQUESTS[4])
    assert ccr.cluster.initial_cluster_version == "1-2-3"
    assert ccr.cluster.node_pools[0].config.service_account == "sa-i"


def test_workload_identity_pool():
    ccr = new_create_cluster_request(VALID_REQUESTS[3])
    assert ccr.cluster.workload_identity_config.workload_pool == "project-g.svc.id.goog"


def test_workload_identity_absent_by_default():
    ccr = new_create_cluster_request(VALID_REQUESTS[0])
    assert ccr.cluster.workload_identity_config is None


def test_addons_enabled():
    ccr = new_create_cluster_request(VALID_REQUESTS[1])
    addons = ccr.cluster.addons_config
    assert addons.istio_config is None
    assert addons.horizontal_pod_autoscaling == {"disabled": False}
    assert addons.http_load_balancing == {"disabled": False}
    assert addons.cloud_run_config == {"disabled": False}


def test_unsupported_addon_raises():
    req = Request(
        cluster_name="c", min_nodes=1, max_nodes=1, node_type="n", addons=["nope"]
    )
    with pytest.raises(ValueError, match="not supported"):
        new_create_cluster_request(req)


def test_deep_copy_copies_fields_but_not_credentials():
    req = Request(
        gcp_credential_file="creds.json",
        project="project-a",
        cluster_name="name-a",
        min_nodes=1,
        max_nodes=2,
        node_type="n1-standard-4",
        region="us-central1",
        zone="a",
        addons=["Istio"],
        enable_workload_identity=True,
        service_account="sa",
    )
    copy = req.deep_copy()
    assert copy.gcp_credential_file == ""
    copy.gcp_credential_file = req.gcp_credential_file
    assert copy == req
    copy.addons.append("CloudRun")
    assert req.addons == ["Istio"]