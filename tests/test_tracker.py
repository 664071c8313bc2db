import logging

from miring.tracker import PositionTracker


def _walk(tracker, *names):
    for name in names:
        tracker.on_element_start(name)


def test_root_path():
    t = PositionTracker()
    t.on_element_start("hml")
    assert t.current_path() == "/hml[1]"
    assert t.current_name() == "hml"


def test_sibling_index_counts_same_named_children_only():
    t = PositionTracker()
    t.on_element_start("hml")
    for name in ("property", "sample", "property", "sample", "property"):
        node = t.on_element_start(name)
        t.on_element_end()
    assert node.index == 3
    t.on_element_start("sample")
    assert t.current_path() == "/hml[1]/sample[3]"


def test_end_ascends_to_parent():
    t = PositionTracker()
    _walk(t, "hml", "sample", "typing")
    t.on_element_end()
    assert t.current_path() == "/hml[1]/sample[1]"
    t.on_element_end()
    t.on_element_end()
    # closing the root keeps it current
    assert t.current_path() == "/hml[1]"


def test_projected_path_does_not_touch_the_tree():
    t = PositionTracker()
    _walk(t, "hml", "sample", "typing", "typing-method")
    t.on_element_start("sbt-ngs")
    t.on_element_end()
    assert t.projected_path("sbt-ngs") == "/hml[1]/sample[1]/typing[1]/typing-method[1]/sbt-ngs[2]"
    assert t.projected_path("sbt-ngs") == "/hml[1]/sample[1]/typing[1]/typing-method[1]/sbt-ngs[2]"
    node = t.on_element_start("sbt-ngs")
    assert node.index == 2


def test_projected_path_for_root():
    assert PositionTracker().projected_path("hml") == "/hml[1]"


def test_empty_tracker_returns_empty_path(caplog):
    t = PositionTracker()
    with caplog.at_level(logging.WARNING, logger="miring.tracker"):
        assert t.current_path() == ""
        t.on_element_end()
    assert t.current_name() == ""
    assert len(caplog.records) == 2


def test_reset_discards_nodes():
    t = PositionTracker()
    _walk(t, "hml", "sample")
    t.reset()
    assert t.current_name() == ""
    t.on_element_start("report")
    assert t.current_path() == "/report[1]"
