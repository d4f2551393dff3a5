import pytest

from bamboo_exporter.labels import PlanLabel, derive_labels


@pytest.mark.parametrize(
    "plan_name, expected",
    [
        ("XXXX Releases - PB-XXXX-21.2", ("XXXX Releases", "PB-XXXX-21.2")),
        ("NoSeparatorHere", ("Unknown", "NoSeparatorHere")),
        ("", ("Unknown", "")),
        ("  padded  ", ("Unknown", "padded")),
        ("Core - Deploy - Prod", ("Core", "Deploy - Prod")),
        ("  Core   -   Nightly  ", ("Core", "Nightly")),
        ("Core-Nightly", ("Unknown", "Core-Nightly")),
        (" - Orphan", ("", "Orphan")),
    ],
)
def test_derive_labels(plan_name, expected):
    assert derive_labels(plan_name) == expected


def test_derive_labels_returns_named_fields():
    label = derive_labels("Platform - Build")

    assert isinstance(label, PlanLabel)
    assert label.project == "Platform"
    assert label.name == "Build"
