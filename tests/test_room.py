import random
import threading

from signaling_relay.routes.rtc.room import Rooms


def test_broadcast_targets_excludes_sender():
    rooms = Rooms()
    for c in ("a", "b", "c"):
        rooms.join(c, "r1")
    rooms.join("d", "r2")

    assert rooms.broadcast_targets("a") == ["b", "c"]
    assert rooms.broadcast_targets("c") == ["a", "b"]
    assert rooms.broadcast_targets("d") == []


def test_unknown_connection_has_no_targets():
    rooms = Rooms()
    rooms.join("a", "r1")
    assert rooms.broadcast_targets("nobody") == []


def test_join_is_idempotent():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("a", "r1")
    rooms.join("b", "r1")

    assert rooms.get_peers_in_room("r1") == ["a", "b"]
    assert rooms.broadcast_targets("b") == ["a"]


def test_join_another_room_replaces_membership():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("b", "r1")
    rooms.join("a", "r2")

    assert rooms.get_peer_room("a") == "r2"
    assert rooms.broadcast_targets("b") == []
    assert rooms.get_peers_in_room("r2") == ["a"]


def test_leave_removes_connection_everywhere():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("b", "r1")

    assert rooms.leave("a") == "r1"
    assert rooms.broadcast_targets("a") == []
    assert rooms.broadcast_targets("b") == []
    assert rooms.get_peer_room("a") is None


def test_leave_is_idempotent():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("b", "r1")

    rooms.leave("a")
    before = (rooms.stats(), rooms.get_peers_in_room("r1"))
    assert rooms.leave("a") is None
    assert rooms.leave("never-joined") is None
    assert (rooms.stats(), rooms.get_peers_in_room("r1")) == before


def test_empty_rooms_are_removed():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("b", "r2")
    rooms.join("b", "r3")
    rooms.leave("a")

    assert rooms.stats() == {"active_rooms": 1, "joined_connections": 1}
    assert rooms.get_peers_in_room("r1") == []


def test_returned_targets_are_a_snapshot():
    rooms = Rooms()
    rooms.join("a", "r1")
    rooms.join("b", "r1")
    targets = rooms.broadcast_targets("a")
    rooms.join("c", "r1")

    assert targets == ["b"]


def test_concurrent_join_leave_never_tears():
    rooms = Rooms()
    stable = ["s0", "s1", "s2"]
    for c in stable:
        rooms.join(c, "shared")

    churners = [f"c{i}" for i in range(8)]
    errors = []
    stop = threading.Event()

    def churn(connection_id):
        rnd = random.Random(connection_id)
        while not stop.is_set():
            rooms.join(connection_id, rnd.choice(["shared", "elsewhere"]))
            rooms.leave(connection_id)

    def observe():
        allowed = set(stable) | set(churners)
        for _ in range(5000):
            targets = rooms.broadcast_targets("s0")
            # stable members are always present, nobody unknown ever shows up
            if not {"s1", "s2"} <= set(targets) or not set(targets) <= allowed or "s0" in targets:
                errors.append(targets)
            if len(targets) != len(set(targets)):
                errors.append(targets)

    workers = [threading.Thread(target=churn, args=(c,)) for c in churners]
    for w in workers:
        w.start()
    observer = threading.Thread(target=observe)
    observer.start()
    observer.join()
    stop.set()
    for w in workers:
        w.join()

    assert errors == []
    assert rooms.broadcast_targets("s0") == ["s1", "s2"]
    assert rooms.stats() == {"active_rooms": 1, "joined_connections": 3}
