"""Tests for override label resolution."""
import os

import pytest
from prometheus_client import CollectorRegistry

from label_exporter.overrides import (
    list_label_files,
    query_to_labels,
    read_label_file,
    resolve_overrides,
)
from label_exporter.self_metrics import ProxyMetrics


@pytest.fixture
def metrics():
    return ProxyMetrics(registry=CollectorRegistry())


def error_count(metrics, kind):
    return metrics.registry.get_sample_value("label_exporter_errors_total", {"type": kind})


def write_label(directory, name, value):
    path = directory / f"{name}.label"
    path.write_text(value)
    return path


def test_query_first_value_wins():
    labels = query_to_labels([("env", "prod"), ("team", "core"), ("env", "dev")])
    assert labels == {"env": "prod", "team": "core"}


def test_files_become_labels(tmp_path):
    write_label(tmp_path, "env", "prod\n")
    write_label(tmp_path, "dc", "us-east-1")

    assert resolve_overrides(str(tmp_path)) == {"env": "prod", "dc": "us-east-1"}


def test_file_content_is_trimmed(tmp_path):
    write_label(tmp_path, "env", "\nprod\r\n\n")
    assert read_label_file(str(tmp_path / "env.label")) == ("env", "prod")


def test_inner_whitespace_is_kept(tmp_path):
    write_label(tmp_path, "owner", "  data team  \n")
    assert resolve_overrides(str(tmp_path)) == {"owner": "  data team  "}


def test_files_win_over_query(tmp_path):
    write_label(tmp_path, "env", "prod")

    overrides = resolve_overrides(str(tmp_path), [("env", "dev"), ("job", "node")])

    assert overrides == {"env": "prod", "job": "node"}


def test_other_files_ignored(tmp_path):
    write_label(tmp_path, "env", "prod")
    (tmp_path / "README").write_text("not a label")
    (tmp_path / "env.label.bak").write_text("old")

    assert resolve_overrides(str(tmp_path)) == {"env": "prod"}


def test_top_level_only_by_default(tmp_path):
    write_label(tmp_path, "env", "prod")
    nested = tmp_path / "nested"
    nested.mkdir()
    write_label(nested, "rack", "r12")

    assert resolve_overrides(str(tmp_path)) == {"env": "prod"}


def test_recursive_walk(tmp_path):
    write_label(tmp_path, "env", "prod")
    nested = tmp_path / "nested" / "deeper"
    nested.mkdir(parents=True)
    write_label(nested, "rack", "r12")

    overrides = resolve_overrides(str(tmp_path), recursive=True)

    assert overrides == {"env": "prod", "rack": "r12"}


def test_recursive_duplicates_resolved_in_path_order(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    write_label(tmp_path / "a", "env", "first")
    write_label(tmp_path / "b", "env", "second")

    paths, errors = list_label_files(str(tmp_path), recursive=True)

    assert paths == [
        os.path.join(str(tmp_path), "a", "env.label"),
        os.path.join(str(tmp_path), "b", "env.label"),
    ]
    assert errors == []
    assert resolve_overrides(str(tmp_path), recursive=True) == {"env": "second"}


@pytest.mark.parametrize("recursive", [False, True])
def test_missing_directory_is_not_fatal(tmp_path, metrics, recursive):
    missing = str(tmp_path / "does-not-exist")

    overrides = resolve_overrides(missing, [("env", "dev")], metrics=metrics, recursive=recursive)

    assert overrides == {"env": "dev"}
    assert error_count(metrics, "list-labels-dir") == 1.0


def test_unreadable_file_is_skipped(tmp_path, metrics):
    write_label(tmp_path, "env", "prod")
    # A directory with a .label name cannot be read as a file
    (tmp_path / "broken.label").mkdir()

    overrides = resolve_overrides(str(tmp_path), metrics=metrics)

    assert overrides == {"env": "prod"}
    assert error_count(metrics, "read-label-file") == 1.0


def test_empty_directory(tmp_path, metrics):
    assert resolve_overrides(str(tmp_path), metrics=metrics) == {}
    assert error_count(metrics, "list-labels-dir") is None


def test_files_reread_every_call(tmp_path):
    path = write_label(tmp_path, "env", "prod")
    assert resolve_overrides(str(tmp_path)) == {"env": "prod"}

    path.write_text("staging")
    assert resolve_overrides(str(tmp_path)) == {"env": "staging"}

    path.unlink()
    assert resolve_overrides(str(tmp_path)) == {}
