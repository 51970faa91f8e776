"""Tests for the sample data fallback."""

from __future__ import annotations

from pnode_scout.aggregate import SAMPLE_NODE_COUNT, SampleDataSource
from pnode_scout.scoring import sort_records


class TestSampleDataSource:
    """Tests for the deterministic sample network."""

    def test_generates_full_sample_network(self) -> None:
        """The sample network has the documented size."""
        assert len(SampleDataSource(latest_version="0.5.0").records()) == SAMPLE_NODE_COUNT == 75

    def test_same_seed_same_network(self) -> None:
        """Equal seeds produce the same peers with the same scores."""
        first = SampleDataSource(latest_version="0.5.0").records()
        second = SampleDataSource(latest_version="0.5.0").records()

        assert [(r.pubkey, r.sri) for r in first] == [(r.pubkey, r.sri) for r in second]

    def test_different_seed_different_network(self) -> None:
        """The seed actually drives generation."""
        first = SampleDataSource(latest_version="0.5.0", seed=1).records()
        second = SampleDataSource(latest_version="0.5.0", seed=2).records()

        assert {r.pubkey for r in first} != {r.pubkey for r in second}

    def test_records_are_sorted_and_in_range(self) -> None:
        """Sample records obey the same invariants as live ones."""
        records = SampleDataSource(latest_version="0.5.0", count=20).records()

        assert records == sort_records(records)
        for record in records:
            assert 0 <= record.sri <= 100
            assert (record.status == "online") == (record.rpc_latency is not None)
            assert record.availability == (100 if record.status == "online" else 0)

    def test_compliance_follows_latest_version(self) -> None:
        """Raising the reference release makes every sample peer outdated."""
        records = SampleDataSource(latest_version="9.0.0", count=20).records()

        assert not any(r.is_latest_version for r in records)

    def test_callers_get_a_copy(self) -> None:
        """Mutating a returned list does not corrupt the source."""
        source = SampleDataSource(latest_version="0.5.0", count=5)
        source.records().clear()

        assert len(source.records()) == 5

    def test_reset_regenerates_same_peers(self) -> None:
        """After a reset the network is rebuilt from the same seed."""
        source = SampleDataSource(latest_version="0.5.0", count=5)
        before = [r.pubkey for r in source.records()]
        source.reset()

        assert [r.pubkey for r in source.records()] == before
