import asyncio

import pytest

from conftest import FakeGitHubClient, make_file_entry
from relay.core.errors import FileListingError
from relay.core.github.collector import PRFileCollector


def collect(client):
    return asyncio.run(PRFileCollector(client).collect("octo", "widgets", 42, "base-sha", "head-sha"))


class TestPagination:
    @pytest.mark.parametrize("total,expected_calls", [(100, 2), (150, 2), (0, 1), (99, 1), (200, 3)])
    def test_listing_calls(self, total, expected_calls):
        client = FakeGitHubClient(files=[make_file_entry(f"f{i}.py") for i in range(total)])
        files = collect(client)

        assert len(client.page_calls) == expected_calls
        assert client.page_calls == list(range(1, expected_calls + 1))
        assert len(files) == total

    def test_order_is_preserved(self):
        names = [f"dir/{i:03d}.py" for i in range(150)]
        client = FakeGitHubClient(files=[make_file_entry(n) for n in reversed(names)])
        files = collect(client)
        assert [f.filename for f in files] == list(reversed(names))

    def test_listing_error_propagates(self):
        client = FakeGitHubClient(fail_listing=True)
        with pytest.raises(FileListingError):
            collect(client)


class TestContentResolution:
    def test_added_file_has_no_base_content(self):
        client = FakeGitHubClient(files=[make_file_entry("new.py", status="added")])
        [changed] = collect(client)

        assert changed.base_content is None
        assert changed.head_content == "new.py@head-sha"
        assert client.content_calls == [("new.py", "head-sha")]

    def test_removed_file_has_no_head_content(self):
        client = FakeGitHubClient(files=[make_file_entry("old.py", status="removed")])
        [changed] = collect(client)

        assert changed.head_content is None
        assert changed.base_content == "old.py@base-sha"
        assert client.content_calls == [("old.py", "base-sha")]

    def test_modified_file_has_both(self):
        client = FakeGitHubClient(files=[make_file_entry("a.py")])
        [changed] = collect(client)

        assert changed.base_content == "a.py@base-sha"
        assert changed.head_content == "a.py@head-sha"

    def test_renamed_file_fetches_both_refs(self):
        client = FakeGitHubClient(files=[make_file_entry("moved.py", status="renamed")])
        collect(client)
        assert client.content_calls == [("moved.py", "base-sha"), ("moved.py", "head-sha")]

    def test_unresolvable_content_is_none(self):
        client = FakeGitHubClient(files=[make_file_entry("logo.png")], contents={})
        [changed] = collect(client)
        assert changed.base_content is None
        assert changed.head_content is None
        assert changed.status == "modified"

    def test_metadata_is_kept(self):
        client = FakeGitHubClient(files=[make_file_entry("a.py", patch=None)])
        [changed] = collect(client)

        assert changed.additions == 1
        assert changed.deletions == 1
        assert changed.changes == 2
        assert changed.patch is None

    def test_invariants_hold_across_statuses(self):
        statuses = ["added", "removed", "modified", "renamed", "added", "removed"]
        client = FakeGitHubClient(files=[make_file_entry(f"{i}.py", status=s) for i, s in enumerate(statuses)])
        for changed in collect(client):
            if changed.status == "added":
                assert changed.base_content is None
            if changed.status == "removed":
                assert changed.head_content is None
