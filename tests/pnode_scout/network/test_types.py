"""Tests for peer identity and addressing types."""

from __future__ import annotations

import pytest

from pnode_scout.network import PeerAddress


class TestPeerAddress:
    """Tests for PeerAddress validation and parsing."""

    def test_str_is_host_colon_port(self) -> None:
        """Addresses render as host:port."""
        assert str(PeerAddress(host="10.0.0.1", port=6000)) == "10.0.0.1:6000"

    def test_equal_addresses_hash_equal(self) -> None:
        """Addresses are value objects usable as set members."""
        assert {PeerAddress("10.0.0.1", 6000), PeerAddress("10.0.0.1", 6000)} == {
            PeerAddress("10.0.0.1", 6000)
        }

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_rejects_out_of_range_port(self, port: int) -> None:
        """Ports outside 1-65535 are invalid."""
        with pytest.raises(ValueError, match="out of range"):
            PeerAddress(host="10.0.0.1", port=port)

    def test_rejects_empty_host(self) -> None:
        """An empty host is invalid."""
        with pytest.raises(ValueError, match="empty"):
            PeerAddress(host="", port=6000)

    def test_parse_applies_default_port(self) -> None:
        """A bare host takes the default port."""
        assert PeerAddress.parse(" 173.212.220.65 ", 6000) == PeerAddress("173.212.220.65", 6000)

    def test_parse_keeps_explicit_port(self) -> None:
        """An explicit port wins over the default."""
        assert PeerAddress.parse("10.0.0.1:7000", 6000) == PeerAddress("10.0.0.1", 7000)

    def test_parse_rejects_non_numeric_port(self) -> None:
        """A garbled port is an error, not silently defaulted."""
        with pytest.raises(ValueError, match="Invalid port"):
            PeerAddress.parse("10.0.0.1:abc", 6000)

    def test_parse_bare_ipv6_is_portless(self) -> None:
        """A bare IPv6 address is not split at its last colon."""
        assert PeerAddress.parse("::1", 6000) == PeerAddress("::1", 6000)
        assert PeerAddress.parse("2001:db8::7", 6000) == PeerAddress("2001:db8::7", 6000)

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("[::1]:7000", PeerAddress("::1", 7000)),
            ("[2001:db8::7]", PeerAddress("2001:db8::7", 6000)),
        ],
    )
    def test_parse_bracketed_ipv6(self, text: str, expected: PeerAddress) -> None:
        """Brackets separate an IPv6 host from its port."""
        assert PeerAddress.parse(text, 6000) == expected

    @pytest.mark.parametrize("text", ["[::1", "[::1]7000", "[::1]:x"])
    def test_parse_rejects_malformed_brackets(self, text: str) -> None:
        """Broken bracket forms are errors."""
        with pytest.raises(ValueError):
            PeerAddress.parse(text, 6000)

    def test_str_brackets_ipv6(self) -> None:
        """IPv6 hosts render in bracket form and parse back."""
        address = PeerAddress("::1", 7000)

        assert str(address) == "[::1]:7000"
        assert PeerAddress.parse(str(address), 6000) == address
