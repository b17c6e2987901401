"""Tests for the depth-bounded tree walker."""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from lstreelib import Display
from lstreelib.aio import (
    CollectErrorsPolicy,
    FailFastPolicy,
    InvalidEntryNameError,
    Meta,
    MetaWalker,
    iter_tree,
)
from lstreelib.aio import meta as meta_module

from conftest import child, child_names, deny_scandir_for, make_file


class TestDepth:

    @pytest.mark.asyncio
    async def test_depth_zero_does_not_expand_root(self, sample_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy())
        root = await walker.walk(sample_tree, 0)
        assert root.content is None
        assert walker.directories_read == 0

    @pytest.mark.asyncio
    async def test_depth_zero_on_a_file(self, sample_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(sample_tree / "a", 0)
        assert root.content is None

    @pytest.mark.asyncio
    async def test_depth_one_gives_direct_children(self, sample_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(sample_tree, 1)
        assert child_names(root) == ["a", "b"]
        assert child(root, "a").content is None
        # Cut off by depth, not empty
        assert child(root, "b").content is None

    @pytest.mark.asyncio
    async def test_unbounded_walk(self, deep_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(deep_tree, None)
        three = child(child(child(root, "one"), "two"), "three")
        assert child_names(three) == ["f3"]
        assert child(three, "f3").content is None

    @pytest.mark.asyncio
    async def test_depth_two_stops_at_second_level(self, deep_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(deep_tree, 2)
        one = child(root, "one")
        assert child_names(one) == ["f1", "two"]
        assert child(one, "two").content is None

    @pytest.mark.asyncio
    async def test_negative_depth_is_rejected(self, sample_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy())
        with pytest.raises(ValueError, match="depth cannot be negative"):
            await walker.walk(sample_tree, -1)
        assert walker.entries_built == 0

    @pytest.mark.asyncio
    async def test_negative_depth_rejected_by_recurse_into(self, sample_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy())
        root = await walker.build_meta(sample_tree)
        with pytest.raises(ValueError):
            await walker.recurse_into(root, -3)
        assert walker.directories_read == 0

    @pytest.mark.asyncio
    async def test_file_root_is_not_expanded(self, sample_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy())
        meta = await walker.build_meta(sample_tree / "a")
        assert await walker.recurse_into(meta, 5) is None

    @pytest.mark.asyncio
    async def test_empty_directory_expands_to_empty_list(self, tmp_path):
        (tmp_path / "empty").mkdir()
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(tmp_path, None)
        assert child(root, "empty").content == []


class TestDisplayModes:

    @pytest.mark.asyncio
    async def test_directory_itself(self, sample_tree):
        walker = MetaWalker(display=Display.DISPLAY_DIRECTORY_ITSELF, policy=CollectErrorsPolicy())
        root = await walker.walk(sample_tree, None)
        assert root.content is None
        assert walker.directories_read == 0

    @pytest.mark.asyncio
    async def test_only_visible_skips_hidden(self, deep_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(deep_tree, None)
        for node, depth in iter_tree(root):
            if depth > 0:
                assert not node.name.name.startswith(".")
        assert ".hidden" not in child_names(root)

    @pytest.mark.asyncio
    async def test_all_puts_dot_and_dotdot_first(self, deep_tree):
        walker = MetaWalker(display=Display.DISPLAY_ALL, policy=CollectErrorsPolicy())
        root = await walker.walk(deep_tree, 1)

        assert root.content[0].name.name == "."
        assert root.content[1].name.name == ".."
        assert root.content[0].path == root.path
        assert root.content[1].path == deep_tree.resolve().parent
        assert ".hidden" in [entry.name.name for entry in root.content[2:]]

    @pytest.mark.asyncio
    async def test_all_adds_dot_entries_in_every_expanded_directory(self, sample_tree):
        walker = MetaWalker(display=Display.DISPLAY_ALL, policy=CollectErrorsPolicy())
        root = await walker.walk(sample_tree, None)
        b = child(root, "b")
        assert [entry.name.name for entry in b.content[:2]] == [".", ".."]
        assert b.content[1].path == sample_tree.resolve()
        assert child_names(b) == [".", "..", "c"]

    @pytest.mark.asyncio
    async def test_synthetic_entries_are_not_expanded(self, sample_tree):
        walker = MetaWalker(display=Display.DISPLAY_ALL, policy=CollectErrorsPolicy())
        root = await walker.walk(sample_tree, None)
        assert root.content[0].content is None
        assert root.content[1].content is None

    @pytest.mark.asyncio
    async def test_dotdot_of_filesystem_root_is_root(self):
        anchor = Path(os.path.abspath(os.sep))
        walker = MetaWalker(display=Display.DISPLAY_ALL, policy=CollectErrorsPolicy())
        root = await walker.build_meta(anchor)
        content = await walker.recurse_into(root, 1)
        assert content[1].name.name == ".."
        assert content[1].path == anchor.resolve()


class TestIgnoreGlobs:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("display", [Display.DISPLAY_ONLY_VISIBLE, Display.DISPLAY_ALL])
    async def test_matching_names_are_absent(self, deep_tree, display):
        walker = MetaWalker(display=display, ignore_globs=["*.log", "two"], policy=CollectErrorsPolicy())
        root = await walker.walk(deep_tree, None)
        names = [node.name.name for node, _ in iter_tree(root)]
        assert "notes.log" not in names
        assert "two" not in names
        assert "f2" not in names
        assert "top.txt" in names

    @pytest.mark.asyncio
    async def test_hidden_can_be_ignored_in_all_mode(self, deep_tree):
        walker = MetaWalker(display=Display.DISPLAY_ALL, ignore_globs=[".hid*"], policy=CollectErrorsPolicy())
        root = await walker.walk(deep_tree, 1)
        assert ".hidden" not in child_names(root)


class TestEntryLocalErrors:

    @pytest.mark.asyncio
    async def test_unreadable_directory_does_not_hide_siblings(self, deep_tree):
        policy = CollectErrorsPolicy()
        locked = deep_tree / "one"
        walker = MetaWalker(policy=policy)
        with deny_scandir_for(locked):
            root = await walker.walk(deep_tree, None)

        assert child_names(root) == ["notes.log", "one", "side", "top.txt"]
        assert child(root, "one").content is None
        assert child_names(child(root, "side")) == ["s1"]
        assert len(policy.errors) == 1
        assert policy.messages == [f"cannot access '{locked}': Permission denied"]
        assert walker.unreadable == {locked}

    @pytest.mark.skipif(
        os.name != 'posix' or (hasattr(os, 'geteuid') and os.geteuid() == 0),
        reason="needs POSIX permissions and a non-root user",
    )
    @pytest.mark.asyncio
    async def test_real_permission_denied(self, deep_tree):
        locked = deep_tree / "side"
        os.chmod(locked, 0)
        try:
            policy = CollectErrorsPolicy()
            root = await MetaWalker(policy=policy).walk(deep_tree, None)
        finally:
            os.chmod(locked, 0o755)

        assert "one" in child_names(root)
        assert child(root, "side").content is None
        assert len(policy.errors) == 1
        assert policy.errors[0]['error_type'] == 'PermissionError'

    @pytest.mark.asyncio
    async def test_entry_that_cannot_be_stated_is_skipped(self, sample_tree):
        real = meta_module.read_metadata
        broken = sample_tree / "a"

        def flaky(path):
            if Path(path) == broken:
                raise FileNotFoundError(2, "No such file or directory", str(path))
            return real(path)

        policy = CollectErrorsPolicy()
        with patch.object(meta_module, 'read_metadata', side_effect=flaky):
            root = await MetaWalker(policy=policy).walk(sample_tree, None)

        assert child_names(root) == ["b"]
        assert policy.messages == [f"cannot access '{broken}': No such file or directory"]

    @pytest.mark.asyncio
    async def test_fail_fast_policy_propagates(self, deep_tree):
        with deny_scandir_for(deep_tree / "one"):
            with pytest.raises(PermissionError):
                await MetaWalker(policy=FailFastPolicy()).walk(deep_tree, None)

    @pytest.mark.asyncio
    async def test_missing_root_is_fatal(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await MetaWalker(policy=CollectErrorsPolicy()).walk(tmp_path / "missing", None)

    @pytest.mark.asyncio
    async def test_unreadable_root_is_reported_not_raised(self, sample_tree):
        policy = CollectErrorsPolicy()
        with deny_scandir_for(sample_tree):
            root = await MetaWalker(policy=policy).walk(sample_tree, None)
        assert root.content is None
        assert len(policy.errors) == 1


def make_undecodable(directory: Path) -> None:
    if sys.platform != 'linux' or sys.getfilesystemencoding().lower() not in ('utf-8', 'utf8'):
        pytest.skip("needs a byte-oriented filesystem with UTF-8 names")
    raw = os.path.join(os.fsencode(directory), b"bad\xff")
    try:
        fd = os.open(raw, os.O_CREAT | os.O_WRONLY, 0o644)
    except OSError as e:
        pytest.skip(f"filesystem rejects undecodable names: {e}")
    os.close(fd)


class TestInvalidNames:

    @pytest.mark.asyncio
    async def test_invalid_name_in_root_escapes(self, tmp_path):
        make_file(tmp_path / "fine", 1)
        make_undecodable(tmp_path)
        with pytest.raises(InvalidEntryNameError):
            await MetaWalker(policy=CollectErrorsPolicy()).walk(tmp_path, None)

    @pytest.mark.asyncio
    async def test_invalid_name_below_root_drops_that_directory(self, tmp_path):
        make_file(tmp_path / "ok" / "file", 1)
        (tmp_path / "poisoned").mkdir()
        make_undecodable(tmp_path / "poisoned")

        policy = CollectErrorsPolicy()
        root = await MetaWalker(policy=policy).walk(tmp_path, None)

        assert child_names(root) == ["ok"]
        assert len(policy.errors) == 1
        assert policy.errors[0]['error_type'] == 'InvalidEntryNameError'
        assert policy.errors[0]['path'] == tmp_path / "poisoned"

    @pytest.mark.asyncio
    async def test_invalid_name_is_checked_before_ignore_globs(self, tmp_path):
        make_undecodable(tmp_path)
        walker = MetaWalker(ignore_globs=["bad*"], policy=CollectErrorsPolicy())
        with pytest.raises(InvalidEntryNameError):
            await walker.walk(tmp_path, 1)


class TestWalkerState:

    @pytest.mark.asyncio
    async def test_single_slot_semaphore_does_not_deadlock(self, deep_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy(), max_concurrent=1)
        root = await walker.walk(deep_tree, None)
        assert child_names(root) == ["notes.log", "one", "side", "top.txt"]

    @pytest.mark.asyncio
    async def test_stats(self, sample_tree):
        async with MetaWalker(ignore_globs=["*.tmp"], policy=CollectErrorsPolicy()) as walker:
            await walker.walk(sample_tree, None)
            stats = await walker.get_stats()

        assert stats['entries_built'] == 4  # t, a, b, c
        assert stats['directories_read'] == 2
        assert stats['entries_skipped'] == 0
        assert stats['ignore_globs'] == ["*.tmp"]
        assert stats['display'] == Display.DISPLAY_ONLY_VISIBLE.value

    @pytest.mark.skipif(os.name != 'posix', reason="owner cache is POSIX only")
    @pytest.mark.asyncio
    async def test_owner_cache_resolves_each_id_once(self, deep_tree):
        walker = MetaWalker(policy=CollectErrorsPolicy())
        await walker.walk(deep_tree, None)
        cache = walker.resolver.owner_cache
        assert walker.entries_built > 5
        assert cache.lookups == len(cache)

    @pytest.mark.asyncio
    async def test_nodes_own_their_children(self, deep_tree):
        root = await MetaWalker(policy=CollectErrorsPolicy()).walk(deep_tree, None)
        seen = set()
        for node, _ in iter_tree(root):
            assert id(node) not in seen
            seen.add(id(node))
            if node.content is not None:
                assert node.is_directory
        assert all(isinstance(node, Meta) for node, _ in iter_tree(root))
