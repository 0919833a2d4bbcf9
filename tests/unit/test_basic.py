"""Basic tests to verify project setup."""


def test_import_cache_operator():
    """Test that cache_operator package can be imported."""
    import cache_operator

    assert cache_operator.__version__ == "0.1.0"


def test_import_cli():
    """Test that CLI module can be imported."""
    from cache_operator import cli

    assert cli.app is not None


def test_import_models():
    """Test that models module exports the resource models."""
    from cache_operator import models

    assert models.CacheCluster is not None
    assert models.ManagedWorkload is not None
    assert models.RuntimePod is not None
