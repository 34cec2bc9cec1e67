"""Unit tests for network variant loading."""
import pytest

from chain_indexer.config.infrastructure_config import DEFAULT_NETWORKS_FILE, NodeDefaults
from chain_indexer.config.networks import load_network_variants, parse_network_variants
from chain_indexer.errors import ConfigurationError
from chain_indexer.models import NodeSpec


def test_parse_with_defaults():
    """Test that node defaults fill absent fields."""
    document = {"networks": [
        {"name": "mainnet"},
        {"name": "sepolia", "instance_class": "i8g.2xlarge", "extraction_volume_size_gib": 2048},
    ]}
    defaults = NodeDefaults(instance_class="i8g.4xlarge", extraction_volume_size_gib=8000)

    assert parse_network_variants(document, defaults) == [
        NodeSpec("mainnet", "i8g.4xlarge", 8000),
        NodeSpec("sepolia", "i8g.2xlarge", 2048),
    ]


def test_parse_without_defaults_leaves_fields_absent():
    """Test that absent fields stay absent without defaults."""
    specs = parse_network_variants({"networks": [{"name": "mainnet"}]})

    assert specs == [NodeSpec("mainnet")]


@pytest.mark.parametrize("document", [
    None,
    {},
    {"networks": "mainnet"},
    {"networks": [{"instance_class": "i8g.4xlarge"}]},
    {"networks": [{"name": "mainnet", "extraction_volume_size_gib": "big"}]},
])
def test_malformed_documents(document):
    """Test rejection of malformed variant documents."""
    with pytest.raises(ConfigurationError):
        parse_network_variants(document)


def test_load_file(tmp_path):
    """Test loading variants from a file."""
    path = tmp_path / "networks.yaml"
    path.write_text("networks:\n  - name: holesky\n    extraction_volume_size_gib: 1024\n")

    assert load_network_variants(path) == [NodeSpec("holesky", extraction_volume_size_gib=1024)]


def test_load_missing_file(tmp_path):
    """Test that a missing variants file is a configuration error."""
    with pytest.raises(ConfigurationError):
        load_network_variants(tmp_path / "absent.yaml")


def test_load_invalid_yaml(tmp_path):
    """Test that invalid YAML is a configuration error."""
    path = tmp_path / "networks.yaml"
    path.write_text("networks: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_network_variants(path)


def test_shipped_variants():
    """Test the packaged network variants."""
    specs = load_network_variants(DEFAULT_NETWORKS_FILE)

    assert [spec.network_variant_name for spec in specs] == ["mainnet"]
    assert specs[0].extraction_volume_size_gib == 10000
