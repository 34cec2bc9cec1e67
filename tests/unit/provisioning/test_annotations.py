"""Unit tests for linter suppression annotations."""
from chain_indexer.provisioning.annotations import AnnotationMap, Suppression


def test_add_and_lookup():
    """Test adding suppressions and looking them up by resource."""
    annotations = AnnotationMap()
    annotations.add("node", [Suppression("R1", "first"), Suppression("R2", "second")])

    assert [s.rule_id for s in annotations.for_resource("node")] == ["R1", "R2"]
    assert annotations.for_resource("missing") == ()


def test_same_rule_replaced():
    """Test that a later reason for a rule replaces the earlier one."""
    annotations = AnnotationMap()
    annotations.add("stack", [Suppression("IAM5", "topics")])
    annotations.add("stack", [Suppression("IAM5", "topics and metrics")])

    assert annotations.as_dict() == {"stack": (Suppression("IAM5", "topics and metrics"),)}
