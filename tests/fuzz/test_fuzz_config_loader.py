import random
import string
import pytest
from podman_deploy.PARSERS.config_loader import ConfigLoader
from podman_deploy.errors import ConfigParseError

def random_string(rng, length):
    return ''.join(rng.choice(string.printable) for _ in range(length))

def test_fuzz_config_loader():
    rng = random.Random(1234)
    loader = ConfigLoader()
    for _ in range(200):
        content = random_string(rng, rng.randint(0, 500))
        # Random junk is either rejected as a config error or, at worst, parsed
        try:
            loader.parse_from_string(content)
        except ConfigParseError:
            pass

def test_edge_cases_config_loader():
    loader = ConfigLoader()

    for content in ["", "   \n\t  ", "~", "42", "[1, 2, 3]", "application_name: x"]:
        with pytest.raises(ConfigParseError):
            loader.parse_from_string(content)

    # Very long container list
    pods = "\n".join(
        f"      - name: c{i}\n        image: busybox:{i}" for i in range(500)
    )
    config = loader.parse_from_string(
        "application_name: big\ndata_path: /srv\npods:\n  - name: p\n    containers:\n" + pods
    )
    assert len(config.pods[0].containers) == 500
