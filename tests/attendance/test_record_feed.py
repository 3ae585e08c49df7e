from institute_attendance.attendance.events import RecordFeed


def test_publish_reaches_only_that_session():
    feed = RecordFeed()
    got_1, got_2 = [], []
    feed.subscribe(1, got_1.append)
    feed.subscribe(2, got_2.append)

    feed.publish(1, ["r1"])

    assert got_1 == [["r1"]]
    assert got_2 == []


def test_unsubscribe_stops_delivery():
    feed = RecordFeed()
    got = []
    unsubscribe = feed.subscribe(1, got.append)

    unsubscribe()
    feed.publish(1, ["r1"])

    assert got == []
    assert not feed.has_subscribers(1)


def test_failing_subscriber_does_not_block_others():
    feed = RecordFeed()
    got = []

    def boom(records):
        raise RuntimeError("boom")

    feed.subscribe(1, boom)
    feed.subscribe(1, got.append)
    feed.publish(1, ["r1"])

    assert got == [["r1"]]
