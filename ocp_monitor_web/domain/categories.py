from __future__ import annotations

# Fixed display names for the monitoring command groups in the manifest.
CATEGORY_NAMES = {
    "A": "Cluster-Wide Health & Platform",
    "B": "Node Health (Master & Worker)",
    "C": "Control Plane",
    "D": "Certificates",
    "E": "Projects/Namespaces & Quotas",
    "F": "Application Health",
    "G": "Storage (PV/PVC/SC)",
    "H": "Networking",
    "I": "Logging & Events",
    "J": "Performance & Resource Metrics",
    "K": "Service Mesh (Istio & Kiali)",
    "L": "Data Grid (Infinispan/Hazelcast)",
    "M": "3Scale API Management",
    "N": "Kafka (Strimzi/Red Hat)",
    "O": "Storage Platform (ODF/Ceph)",
    "P": "MQ / Streaming",
    "Q": "HashiCorp Vault",
    "R": "Observability Stack",
    "S": "Discovery Loops",
    "T": "RHACS / ACS Presence",
}


def category_name(category_id: str) -> str:
    return CATEGORY_NAMES.get(category_id, f"Category {category_id}")
