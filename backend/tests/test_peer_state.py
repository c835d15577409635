from datetime import datetime, timedelta, timezone

import pytest

from autocrypt import EncryptPreference, Header, KeyType
from peer_state import ObservedMessage, PeerInfo, PeerState

T0 = datetime(2016, 12, 17, 9, 0, 0, tzinfo=timezone.utc)


def observed(date, header=None, content_type="text/plain"):
    return ObservedMessage(
        content_type=content_type,
        effective_date=date,
        advertisement=header,
    )


@pytest.fixture
def plain_header():
    return Header(addr="alice@example.org", keydata="key-1")


@pytest.fixture
def mutual_header():
    return Header(
        addr="alice@example.org",
        keydata="key-2",
        prefer_encrypt=EncryptPreference.MUTUAL,
    )


class TestPeerInfo:
    
    def test_first_seen_defaults(self):
        peer = PeerInfo.first_seen(T0)
        assert peer.last_seen == T0
        assert peer.last_seen_autocrypt is None
        assert peer.public_key is None
        assert peer.state is PeerState.NONE
        assert peer.typ == KeyType.OpenPGP
    
    def test_naive_datetimes_are_utc(self):
        peer = PeerInfo(last_seen=datetime(2020, 1, 1))
        assert peer.last_seen.tzinfo is timezone.utc
    
    def test_state_tokens(self):
        assert [s.value for s in PeerState] == ["mutual", "nopreference", "reset", "gossip"]
        assert str(PeerState.NONE) == "nopreference"
    
    def test_dict_roundtrip(self):
        peer = PeerInfo(
            last_seen=T0,
            last_seen_autocrypt=T0 - timedelta(days=1),
            public_key="key",
            state=PeerState.GOSSIP,
        )
        assert PeerInfo.from_dict(peer.to_dict()) == peer
    
    def test_copy_is_independent(self):
        peer = PeerInfo.first_seen(T0)
        other = peer.copy()
        other.state = PeerState.RESET
        assert peer.state is PeerState.NONE


class TestUpdateReport:
    
    def test_delivery_report_ignored(self, mutual_header):
        peer = PeerInfo.first_seen(T0)
        before = peer.copy()
        peer.update(observed(T0 + timedelta(days=1), mutual_header, "multipart/report"))
        assert peer == before
    
    def test_delivery_report_without_header_ignored(self):
        peer = PeerInfo.first_seen(T0)
        before = peer.copy()
        peer.update(observed(T0 + timedelta(days=1), content_type="multipart/report"))
        assert peer == before


class TestUpdateStaleGuard:
    
    @pytest.mark.parametrize("with_header", [True, False])
    def test_older_than_last_autocrypt_never_mutates(self, with_header, mutual_header):
        peer = PeerInfo(
            last_seen=T0,
            last_seen_autocrypt=T0,
            public_key="stored",
            state=PeerState.NONE,
        )
        before = peer.copy()
        header = mutual_header if with_header else None
        peer.update(observed(T0 - timedelta(seconds=1), header))
        assert peer == before
    
    def test_equal_to_last_autocrypt_is_not_stale(self, mutual_header):
        peer = PeerInfo(
            last_seen=T0 + timedelta(hours=1),
            last_seen_autocrypt=T0,
            public_key="stored",
        )
        peer.update(observed(T0, mutual_header))
        assert peer.public_key == "key-2"


class TestUpdateWithoutHeader:
    
    def test_newer_message_resets(self):
        peer = PeerInfo.first_seen(T0)
        t1 = T0 + timedelta(days=1)
        peer.update(observed(t1))
        assert peer.state is PeerState.RESET
        assert peer.last_seen == t1
        assert peer.last_seen_autocrypt is None
        assert peer.public_key is None
    
    def test_older_message_leaves_record(self):
        peer = PeerInfo(last_seen=T0, public_key="k", state=PeerState.MUTUAL)
        before = peer.copy()
        peer.update(observed(T0 - timedelta(days=1)))
        assert peer == before
    
    def test_same_date_leaves_record(self):
        peer = PeerInfo(last_seen=T0, state=PeerState.MUTUAL)
        peer.update(observed(T0))
        assert peer.state is PeerState.MUTUAL
    
    def test_reset_keeps_stored_key(self):
        peer = PeerInfo(
            last_seen=T0,
            last_seen_autocrypt=T0,
            public_key="k",
            state=PeerState.MUTUAL,
        )
        peer.update(observed(T0 + timedelta(days=1)))
        assert peer.state is PeerState.RESET
        assert peer.public_key == "k"
        assert peer.last_seen_autocrypt == T0


class TestUpdateWithHeader:
    
    def test_mutual_header_sets_mutual(self, mutual_header):
        peer = PeerInfo.first_seen(T0)
        t1 = T0 + timedelta(days=1)
        peer.update(observed(t1, mutual_header))
        assert peer.state is PeerState.MUTUAL
        assert peer.last_seen == t1
        assert peer.last_seen_autocrypt == t1
        assert peer.public_key == "key-2"
    
    def test_non_mutual_header_sets_none(self, plain_header):
        peer = PeerInfo(last_seen=T0, state=PeerState.MUTUAL)
        peer.update(observed(T0 + timedelta(days=1), plain_header))
        assert peer.state is PeerState.NONE
    
    def test_header_after_reset_restores_state(self, mutual_header):
        peer = PeerInfo.first_seen(T0)
        peer.update(observed(T0 + timedelta(days=1)))
        assert peer.state is PeerState.RESET
        peer.update(observed(T0 + timedelta(days=2), mutual_header))
        assert peer.state is PeerState.MUTUAL
    
    def test_old_header_updates_key_but_not_state(self, mutual_header):
        # The key follows every valid header that passes the stale guard;
        # last_seen and state only follow strictly newer messages.
        peer = PeerInfo(
            last_seen=T0,
            last_seen_autocrypt=T0 - timedelta(days=10),
            public_key="old",
            state=PeerState.RESET,
        )
        t_mid = T0 - timedelta(days=5)
        peer.update(observed(t_mid, mutual_header))
        assert peer.public_key == "key-2"
        assert peer.last_seen_autocrypt == t_mid
        assert peer.last_seen == T0
        assert peer.state is PeerState.RESET
    
    def test_first_header_on_first_sight_keeps_none(self, mutual_header):
        peer = PeerInfo.first_seen(T0)
        peer.update(observed(T0, mutual_header))
        assert peer.public_key == "key-2"
        assert peer.last_seen_autocrypt == T0
        assert peer.state is PeerState.NONE
    
    def test_out_of_order_sequence(self, plain_header, mutual_header):
        peer = PeerInfo.first_seen(T0)
        peer.update(observed(T0 + timedelta(days=3), mutual_header))
        peer.update(observed(T0 + timedelta(days=1)))
        peer.update(observed(T0 + timedelta(days=2), plain_header))
        assert peer.state is PeerState.MUTUAL
        assert peer.public_key == "key-2"
        assert peer.last_seen == T0 + timedelta(days=3)
    
    def test_gossip_never_produced(self, plain_header, mutual_header):
        peer = PeerInfo.first_seen(T0)
        for i, header in enumerate([plain_header, None, mutual_header, None], start=1):
            peer.update(observed(T0 + timedelta(days=i), header))
            assert peer.state is not PeerState.GOSSIP
