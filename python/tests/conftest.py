"""Shared dependency graphs for the depcheck test suite."""

import pytest

from depcheck.models import PackageRecord


def rec(name, version, *deps, workspace=False):
    """Build a record; deps are 'name version' strings."""
    return PackageRecord(
        name=name,
        version=version,
        has_external_source=not workspace,
        dependencies=tuple(tuple(dep.split()) for dep in deps),
    )


@pytest.fixture
def diamond_records():
    """
    w -> a 1.0.0, b
    a 1.0.0 -> c 1.0.0
    b -> a 2.0.0
    a 2.0.0 -> c 2.0.0
    """
    return [
        rec("w", "0.1.0", "a 1.0.0", "b 1.0.0", workspace=True),
        rec("a", "1.0.0", "c 1.0.0"),
        rec("b", "1.0.0", "a 2.0.0"),
        rec("a", "2.0.0", "c 2.0.0"),
        rec("c", "1.0.0"),
        rec("c", "2.0.0"),
    ]


@pytest.fixture
def mixed_blame_records():
    """
    w -> x, d 1.0.0          (indirect for y, direct for d)
    x -> y 1.0.0, z          (direct for y)
    z -> y 2.0.0, d 2.0.0, e
    """
    return [
        rec("w", "0.1.0", "x 1.0.0", "d 1.0.0", workspace=True),
        rec("x", "1.0.0", "y 1.0.0", "z 1.0.0"),
        rec("z", "1.0.0", "y 2.0.0", "d 2.0.0", "e 1.0.0"),
        rec("y", "1.0.0"),
        rec("y", "2.0.0"),
        rec("d", "1.0.0"),
        rec("d", "2.0.0"),
        rec("e", "1.0.0"),
    ]


@pytest.fixture
def partial_cover_records():
    """
    p -> q, r
    q -> s 1.0.0, s 2.0.0    (covers two of three versions)
    r -> s 3.0.0
    """
    return [
        rec("p", "0.1.0", "q 1.0.0", "r 1.0.0", workspace=True),
        rec("q", "1.0.0", "s 1.0.0", "s 2.0.0"),
        rec("r", "1.0.0", "s 3.0.0"),
        rec("s", "1.0.0"),
        rec("s", "2.0.0"),
        rec("s", "3.0.0"),
    ]


@pytest.fixture
def nested_workspace_records():
    """
    w -> m, l 2.0.0
    m -> l 1.0.0             (m is itself a workspace member)
    """
    return [
        rec("w", "0.1.0", "m 0.1.0", "l 2.0.0", workspace=True),
        rec("m", "0.1.0", "l 1.0.0", workspace=True),
        rec("l", "1.0.0"),
        rec("l", "2.0.0"),
    ]


@pytest.fixture
def all_records(diamond_records, mixed_blame_records, partial_cover_records):
    """Several disconnected graphs at once, with distinct names."""
    renamed = [
        PackageRecord(
            name=f"m_{r.name}",
            version=r.version,
            has_external_source=r.has_external_source,
            dependencies=tuple((f"m_{n}", v) for n, v in r.dependencies),
        )
        for r in mixed_blame_records
    ]
    return diamond_records + renamed + partial_cover_records


@pytest.fixture
def make_record():
    """The record builder used by the fixtures above."""
    return rec
