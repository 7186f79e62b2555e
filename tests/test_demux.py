import queue

import pytest

from ecanode.demux import MSG_BUFF_LEN, ResponseDemultiplexer, TransactionChannels
from ecanode.messages import Message, Node, TransactionInfo


def _response(kind, sender_name, initiator="init", number=0):
    return Message(
        type=kind,
        sender=Node(name=sender_name, meta=b"agent-" + sender_name.encode()),
        transaction=TransactionInfo(initiator=initiator, number=number),
    )


def test_channels_id_matches_transaction_id():
    channels = TransactionChannels("init", 4)
    assert channels.id() == TransactionInfo(initiator="init", number=4).id()


@pytest.mark.parametrize(
    "kind, attribute",
    [
        ("interested", "are_interested"),
        ("not_interested", "are_uninterested"),
        ("prepared", "are_prepared"),
        ("aborted", "have_aborted"),
        ("committed", "have_committed"),
    ],
)
def test_line_selects_queue(kind, attribute):
    channels = TransactionChannels("init", 0)
    assert channels.line(kind) is getattr(channels, attribute)


@pytest.mark.parametrize("kind", ["interested?", "do_commit", "", "PREPARED"])
def test_line_unknown_is_none(kind):
    assert TransactionChannels("init", 0).line(kind) is None


def test_dispatch_delivers_sender_name():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 2)
    demux.register(channels)
    assert demux.dispatch(_response("prepared", "n1", number=2)) is True
    assert channels.are_prepared.get_nowait() == "n1"
    assert channels.have_aborted.empty()


def test_dispatch_routes_by_transaction():
    demux = ResponseDemultiplexer()
    first = TransactionChannels("init", 0)
    second = TransactionChannels("init", 1)
    demux.register(first)
    demux.register(second)
    assert demux.dispatch(_response("interested", "n2", number=1))
    assert first.are_interested.empty()
    assert second.are_interested.get_nowait() == "n2"


def test_dispatch_unknown_transaction_is_discarded():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 0)
    demux.register(channels)
    assert demux.dispatch(_response("prepared", "n1", initiator="other")) is False
    assert channels.are_prepared.empty()


def test_unregister_stops_delivery():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 7)
    demux.register(channels)
    assert channels.id() in demux
    demux.unregister("init", 7)
    assert channels.id() not in demux
    assert len(demux) == 0
    assert demux.dispatch(_response("committed", "n1", number=7)) is False
    assert channels.have_committed.empty()


def test_unregister_unknown_is_harmless():
    demux = ResponseDemultiplexer()
    demux.register(TransactionChannels("init", 0))
    demux.unregister("nobody", 5)
    assert len(demux) == 1


def test_dispatch_unsupported_type_is_discarded():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 0)
    demux.register(channels)
    assert demux.dispatch(_response("can_commit?", "n1")) is False
    assert all(
        channels.line(kind).empty()
        for kind in ("interested", "not_interested", "prepared", "aborted", "committed")
    )


def test_full_line_discards_extra_responses():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 0)
    demux.register(channels)
    names = [f"n{i}" for i in range(MSG_BUFF_LEN)]
    assert all(demux.dispatch(_response("aborted", name)) for name in names)
    assert demux.dispatch(_response("aborted", "extra")) is False
    received = []
    while True:
        try:
            received.append(channels.have_aborted.get_nowait())
        except queue.Empty:
            break
    assert received == names


def test_dispatch_without_sender_raises():
    demux = ResponseDemultiplexer()
    demux.register(TransactionChannels("init", 0))
    message = Message(type="prepared", transaction=TransactionInfo(initiator="init"))
    with pytest.raises(ValueError):
        demux.dispatch(message)


def test_dispatch_after_wire_round_trip():
    demux = ResponseDemultiplexer()
    channels = TransactionChannels("init", 3)
    demux.register(channels)
    wire = _response("not_interested", "n9", number=3).marshal()
    assert demux.dispatch(Message.unmarshal(wire)) is True
    assert channels.are_uninterested.get_nowait() == "n9"