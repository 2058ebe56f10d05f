"""Tests for the tree walker and its merge policy."""

import os
import pytest
from pathlib import Path

from readtree.config.settings import CollisionPolicy, TreeSettings
from readtree.core.lazy import LazyNamespace, Thunk, force_all
from readtree.core.pipeline import read_tree
from readtree.core.walker import Ok, Skip, merge_node, read_tree_impl
from readtree.exceptions import ConventionError, NameCollisionError
from tree_builders import EXPLODING_MODULE, returning, touch_marker, write_module


# ---------------------------------------------------------------------------
# merge_node
# ---------------------------------------------------------------------------


class TestMergeNode:

    def test_contributions_overlay_own_mapping(self):
        merged = merge_node({"a": 1, "b": 2}, [("b", Thunk.of(20)), ("c", Thunk.of(3))])
        assert force_all(merged) == {"a": 1, "b": 20, "c": 3}

    def test_later_contributions_win(self):
        merged = merge_node({}, [("x", Thunk.of("file")), ("x", Thunk.of("directory"))])
        assert merged["x"] == "directory"

    def test_non_mapping_own_value_is_returned_verbatim(self):
        exploding = Thunk(lambda: 1 / 0)
        assert merge_node("plain", [("child", exploding)]) == "plain"
        assert not exploding.is_forced

    def test_contributions_are_not_forced_by_merging(self):
        exploding = Thunk(lambda: 1 / 0)
        merged = merge_node({}, [("child", exploding)])
        assert "child" in merged
        assert not exploding.is_forced
        with pytest.raises(ZeroDivisionError):
            merged["child"]

    def test_lazy_own_value_keeps_its_thunks(self):
        inner = Thunk(lambda: "deferred")
        own = LazyNamespace({"k": inner})
        merged = merge_node(own, [("n", Thunk.of(1))])
        assert merged.thunk("k") is inner
        assert not inner.is_forced


# ---------------------------------------------------------------------------
# read_tree_impl
# ---------------------------------------------------------------------------


class TestReadTreeImpl:

    def test_skip_tree_returns_skip(self, root: Path):
        touch_marker(root, ".skip-tree")
        assert isinstance(read_tree_impl(root, True, {}, TreeSettings()), Skip)

    def test_ok_holds_an_unforced_thunk(self, root: Path):
        write_module(root, "boom.py", EXPLODING_MODULE)
        result = read_tree_impl(root, True, {}, TreeSettings())
        assert isinstance(result, Ok)
        assert isinstance(result.value, Thunk)
        assert not result.value.is_forced
        namespace = result.value.force()
        assert list(namespace) == ["boom"]

    def test_missing_root_raises_from_listing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_tree_impl(tmp_path / "missing", True, {}, TreeSettings())


# ---------------------------------------------------------------------------
# Namespace shape
# ---------------------------------------------------------------------------


class TestEntryPointPresent:

    def test_sibling_module_files_are_not_merged(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1}"))
        write_module(root, "a/b.py", returning("2"))
        assert read_tree(root, {}) == {"a": {"x": 1}}

    def test_sibling_module_files_are_never_loaded(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1}"))
        write_module(root, "a/boom.py", EXPLODING_MODULE)
        assert read_tree(root, {}) == {"a": {"x": 1}}

    def test_subdirectories_overlay_the_entry_point(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1, 'A': 'own'}"))
        write_module(root, "a/A/default.py", returning("{'y': 2}"))
        write_module(root, "a/B/c.py", returning("3"))
        assert read_tree(root, {}) == {"a": {"x": 1, "A": {"y": 2}, "B": {"c": 3}}}

    def test_non_mapping_entry_point_discards_children(self, root: Path):
        write_module(root, "a/default.py", returning("'plain string'"))
        write_module(root, "a/sub/default.py", returning("{'y': 1}"))
        write_module(root, "a/broken/boom.py", EXPLODING_MODULE)
        assert read_tree(root, {}) == {"a": "plain string"}

    def test_entry_point_may_return_a_callable(self, root: Path):
        write_module(root, "fn/default.py", returning("lambda n: n * 2"))
        assert read_tree(root, {})["fn"](4) == 8


class TestEntryPointAbsent:

    def test_module_files_and_subdirectories_are_merged(self, root: Path):
        write_module(root, "x.py", returning("'loaded x'"))
        write_module(root, "y.py", returning("'loaded y'"))
        write_module(root, "z/default.py", returning("{'inner': True}"))
        assert read_tree(root, {}) == {"x": "loaded x", "y": "loaded y", "z": {"inner": True}}

    def test_nested_directory_without_entry_point(self, root: Path):
        write_module(root, "a/b.py", returning("2"))
        assert read_tree(root, {}) == {"a": {"b": 2}}

    def test_non_module_files_are_ignored(self, root: Path):
        write_module(root, "a/b.py", returning("2"))
        write_module(root, "a/sources.json", "{}")
        write_module(root, "a/notes.txt", "")
        assert read_tree(root, {}) == {"a": {"b": 2}}

    def test_empty_directory_is_an_empty_mapping(self, root: Path):
        (root / "empty").mkdir()
        assert read_tree(root, {}) == {"empty": {}}

    def test_subdirectory_wins_over_module_file(self, root: Path):
        write_module(root, "svc.py", returning("'file'"))
        write_module(root, "svc/default.py", returning("{'from': 'directory'}"))
        assert read_tree(root, {}) == {"svc": {"from": "directory"}}

    def test_collision_policy_error_rejects_shared_names(self, root: Path):
        write_module(root, "svc.py", returning("'file'"))
        write_module(root, "svc/default.py", returning("{}"))
        with pytest.raises(NameCollisionError, match="svc"):
            read_tree(root, {}, settings=TreeSettings(collisions=CollisionPolicy.ERROR))


class TestSkipMarkers:

    def test_skip_tree_removes_the_directory(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1}"))
        touch_marker(root / "a", ".skip-tree")
        assert read_tree(root, {}) == {}

    def test_skip_tree_never_visits_descendants(self, root: Path):
        touch_marker(root / "a", ".skip-tree")
        write_module(root, "a/default.py", EXPLODING_MODULE)
        write_module(root, "a/deep/default.py", EXPLODING_MODULE)
        write_module(root, "a/deep/boom.py", EXPLODING_MODULE)
        write_module(root, "keep.py", returning("1"))
        assert read_tree(root, {}) == {"keep": 1}

    def test_skip_tree_with_markers_only(self, root: Path):
        touch_marker(root / "a", ".skip-tree")
        touch_marker(root / "a", ".skip-subtree")
        assert read_tree(root, {}) == {}

    def test_nested_skip_tree_is_silently_omitted(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1}"))
        touch_marker(root / "a" / "hidden", ".skip-tree")
        assert read_tree(root, {}) == {"a": {"x": 1}}

    def test_skip_subtree_keeps_only_the_entry_point_value(self, root: Path):
        write_module(root, "a/default.py", returning("{'x': 1}"))
        write_module(root, "a/sub/default.py", returning("{'y': 2}"))
        write_module(root, "a/broken/default.py", EXPLODING_MODULE)
        touch_marker(root / "a", ".skip-subtree")
        assert read_tree(root, {}) == {"a": {"x": 1}}

    def test_skip_subtree_without_entry_point_keeps_module_files(self, root: Path):
        write_module(root, "a/m.py", returning("3"))
        write_module(root, "a/sub/default.py", returning("{'y': 2}"))
        touch_marker(root / "a", ".skip-subtree")
        assert read_tree(root, {}) == {"a": {"m": 3}}

    def test_skip_subtree_on_root_drops_all_subdirectories(self, root: Path):
        write_module(root, "top.py", returning("'t'"))
        write_module(root, "a/b.py", returning("2"))
        touch_marker(root, ".skip-subtree")
        assert read_tree(root, {}) == {"top": "t"}


class TestVisibility:

    def test_hidden_module_files_never_appear(self, root: Path):
        write_module(root, ".secret.py", EXPLODING_MODULE)
        write_module(root, "public.py", returning("1"))
        assert read_tree(root, {}) == {"public": 1}

    def test_hidden_directories_never_appear(self, root: Path):
        write_module(root, ".cache/default.py", EXPLODING_MODULE)
        write_module(root, "a/b.py", returning("1"))
        assert read_tree(root, {}) == {"a": {"b": 1}}

    def test_pycache_directories_are_excluded_by_default(self, root: Path):
        write_module(root, "__pycache__/stale.py", EXPLODING_MODULE)
        write_module(root, "a.py", returning("1"))
        assert read_tree(root, {}) == {"a": 1}

    def test_custom_exclude_patterns(self, root: Path):
        write_module(root, "a.py", returning("1"))
        write_module(root, "a_test.py", EXPLODING_MODULE)
        settings = TreeSettings(exclude_patterns=["*_test.py"])
        assert read_tree(root, {}, settings=settings) == {"a": 1}


class TestArgumentBundle:

    def test_bundle_reaches_every_depth(self, root: Path):
        write_module(root, "top.py", returning("args['env']"))
        write_module(root, "a/b/c/leaf.py", returning("args['env']"))
        write_module(root, "d/default.py", returning("{'env': args['env']}"))
        namespace = read_tree(root, {"env": "prod"})
        assert namespace == {
            "top": "prod",
            "a": {"b": {"c": {"leaf": "prod"}}},
            "d": {"env": "prod"},
        }

    def test_bundle_is_the_same_object_everywhere(self, root: Path):
        write_module(root, "one.py", returning("args"))
        write_module(root, "nested/two.py", returning("args"))
        bundle = {"k": "v"}
        namespace = read_tree(root, bundle)
        assert namespace["one"] is bundle
        assert namespace["nested"]["two"] is bundle


class TestConventionFailures:

    def test_non_callable_module_fails_with_its_path(self, root: Path):
        bad = write_module(root, "a/bad.py", "tree = {'not': 'callable'}\n")
        with pytest.raises(ConventionError) as excinfo:
            read_tree(root, {})
        assert str(bad) in str(excinfo.value)
        assert "dict" in str(excinfo.value)

    def test_non_callable_entry_point_fails_with_its_path(self, root: Path):
        bad = write_module(root, "a/default.py", "tree = 'text'\n")
        with pytest.raises(ConventionError) as excinfo:
            read_tree(root, {})
        assert str(bad) in str(excinfo.value)
        assert "str" in str(excinfo.value)


class TestSymlinks:

    def test_symlink_cycle_is_not_walked(self, root: Path):
        write_module(root, "a/svc.py", returning("'svc'"))
        os.symlink("..", root / "a" / "up")
        assert read_tree(root, {}) == {"a": {"svc": "svc"}}

    def test_symlinked_directory_is_not_a_subtree(self, root: Path):
        write_module(root.parent / "outside", "leaked.py", EXPLODING_MODULE)
        os.symlink(root.parent / "outside", root / "outside")
        assert read_tree(root, {}) == {}

    def test_symlinked_module_file_is_loaded(self, root: Path):
        target = write_module(root.parent / "shared", "common.py", returning("'linked'"))
        os.symlink(target, root / "common.py")
        assert read_tree(root, {}) == {"common": "linked"}

    def test_symlinked_entry_point_is_used(self, root: Path):
        target = write_module(root.parent / "shared", "entry.py", returning("{'via': 'link'}"))
        (root / "pkg").mkdir()
        os.symlink(target, root / "pkg" / "default.py")
        write_module(root, "pkg/other.py", EXPLODING_MODULE)
        assert read_tree(root, {}) == {"pkg": {"via": "link"}}
