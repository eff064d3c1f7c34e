"""Tests for bounded multi-level expand/collapse."""

import logging

import pytest

from schema_diagram.bulk_fold import BulkFoldController


class _Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, path, collapsed):
        self.calls.append((str(path), collapsed))


class _Widget:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def expand(self, path, is_expand):
        self.calls.append((path, is_expand))
        if self.fail:
            raise RuntimeError("widget detached")


@pytest.fixture
def recorder():
    """Return a propose_toggle callback that records its calls."""
    return _Recorder()


DEEP_EXPANDED = {
    "root": False,
    "root.properties": False,
    "root.properties.b": False,
    "root.properties.b.properties": False,
    "root.properties.b.properties.c": False,
}


class TestExpansion:
    """Relative-depth expansion from the toggled path."""

    def test_expand_two_levels_from_container(self, recorder, scenario_schema):
        """Direct properties are proposed expanded and nothing deeper."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle(
            "root.properties",
            scenario_schema,
            expanding=True,
            max_relative_depth=2,
            collapsed={"root": False, "root.properties": False},
        )
        assert proposals == [("root.properties.a", False), ("root.properties.b", False)]
        assert recorder.calls == [("root.properties.a", False), ("root.properties.b", False)]

    def test_depth_one_skips_expansion(self, recorder, scenario_schema):
        """Only the clicked node toggles; the controller adds nothing."""
        controller = BulkFoldController(recorder)
        assert controller.bulk_toggle("root.properties", scenario_schema, True, 1) == []
        assert recorder.calls == []

    def test_object_base_walks_through_its_container(self, recorder, scenario_schema):
        """From an object the container is the first relative level."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle("root.properties.b", scenario_schema, True, 2)
        assert proposals == [("root.properties.b.properties", False)]

    def test_container_base_resolves_owner(self, recorder, scenario_schema):
        """A trailing properties segment still finds the owning schema."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle("root.properties.b.properties", scenario_schema, True, 2)
        assert proposals == [("root.properties.b.properties.c", False)]

    def test_array_items_are_walked(self, recorder, nested_schema):
        """Array items form one relative level."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle("root.properties.lines", nested_schema, True, 3)
        assert proposals == [
            ("root.properties.lines.items", False),
            ("root.properties.lines.items.properties", False),
        ]

    def test_unresolvable_path_yields_nothing(self, recorder, scenario_schema, caplog):
        """A path missing from the schema is skipped with a log line."""
        caplog.set_level(logging.INFO, logger="schema_diagram.bulk_fold")
        controller = BulkFoldController(recorder)
        assert controller.bulk_toggle("root.properties.zzz", scenario_schema, True, 3) == []
        assert "No schema found" in caplog.text

    def test_already_expanded_paths_are_skipped(self, recorder, scenario_schema):
        """Proposals that change nothing are not emitted."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle(
            "root.properties",
            scenario_schema,
            True,
            2,
            collapsed={"root.properties.a": False},
        )
        assert proposals == [("root.properties.b", False)]


class TestCaps:
    """Bounds on wide schemas."""

    def test_sibling_slice_limits_wide_containers(self, recorder, wide_schema):
        """Only the first slice of properties is expanded."""
        controller = BulkFoldController(recorder, max_paths=100, sibling_slice=20)
        proposals = controller.bulk_toggle("root", wide_schema, True, 3)
        assert proposals[0] == ("root.properties", False)
        assert len(proposals) == 21
        assert proposals[-1] == ("root.properties.field_019", False)

    def test_total_cap_holds_for_hundreds_of_siblings(self, recorder, wide_schema):
        """The path count never exceeds max_paths."""
        controller = BulkFoldController(recorder, max_paths=100, sibling_slice=1000)
        proposals = controller.bulk_toggle("root.properties", wide_schema, True, 5)
        assert len(proposals) == 100
        assert len(recorder.calls) == 100

    def test_invalid_caps_are_rejected(self, recorder):
        """Non-positive caps are configuration errors."""
        with pytest.raises(ValueError):
            BulkFoldController(recorder, max_paths=0)
        with pytest.raises(ValueError):
            BulkFoldController(recorder, sibling_slice=0)


class TestCleanupAndCollapse:
    """Folding back prior deep expansions."""

    def test_cleanup_folds_expansions_beyond_new_depth(self, recorder, scenario_schema):
        """Deeper expanded descendants are collapsed before expanding."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle("root.properties", scenario_schema, True, 2, collapsed=DEEP_EXPANDED)
        assert proposals == [
            ("root.properties.b.properties.c", True),
            ("root.properties.a", False),
        ]

    def test_collapse_folds_every_expanded_descendant(self, recorder, scenario_schema):
        """Collapsing proposes collapsed for each expanded descendant, deepest first."""
        controller = BulkFoldController(recorder)
        proposals = controller.bulk_toggle("root.properties", scenario_schema, False, 3, collapsed=DEEP_EXPANDED)
        assert proposals == [
            ("root.properties.b.properties.c", True),
            ("root.properties.b.properties", True),
            ("root.properties.b", True),
        ]


class TestWidgetHint:
    """Best-effort instructions to an imperative tree widget."""

    def test_widget_receives_segment_arrays(self, recorder, scenario_schema):
        """Hints use the tree editor's array form."""
        widget = _Widget()
        controller = BulkFoldController(recorder, widget=widget)
        controller.bulk_toggle("root.properties", scenario_schema, True, 2)
        assert widget.calls == [(["properties", "a"], True), (["properties", "b"], True)]

    def test_widget_failure_is_ignored(self, recorder, scenario_schema, caplog):
        """A failing widget does not stop the proposals."""
        caplog.set_level(logging.WARNING, logger="schema_diagram.bulk_fold")
        controller = BulkFoldController(recorder, widget=_Widget(fail=True))
        controller.bulk_toggle("root.properties", scenario_schema, True, 2)
        assert len(recorder.calls) == 2
        assert "rejected expand hint" in caplog.text


class TestStagger:
    """Batched emission through the timer service."""

    def test_batches_are_spread_over_time(self, recorder, wide_schema, timers):
        """The first batch is immediate and the rest follow on the timer."""
        controller = BulkFoldController(
            recorder, sibling_slice=5, timers=timers, stagger_seconds=0.1, batch_size=2
        )
        proposals = controller.bulk_toggle("root.properties", wide_schema, True, 2)
        assert len(proposals) == 5
        assert len(recorder.calls) == 2
        assert controller.has_pending_batches
        timers.advance(0.1)
        assert len(recorder.calls) == 4
        timers.advance(0.1)
        assert len(recorder.calls) == 5
        assert not controller.has_pending_batches

    def test_new_call_cancels_outstanding_batches(self, recorder, wide_schema, scenario_schema, timers):
        """Only the latest plan keeps emitting."""
        controller = BulkFoldController(
            recorder, sibling_slice=5, timers=timers, stagger_seconds=0.1, batch_size=2
        )
        controller.bulk_toggle("root.properties", wide_schema, True, 2)
        controller.bulk_toggle("root.properties", scenario_schema, True, 2)
        timers.advance(1.0)
        assert [path for path, _ in recorder.calls] == [
            "root.properties.field_000",
            "root.properties.field_001",
            "root.properties.a",
            "root.properties.b",
        ]
