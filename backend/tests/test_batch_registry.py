"""
Tests for FileRegistry intake, removal, totals and status updates.

QC: Verify that intake:
1. Appends accepted candidates in arrival order
2. Rejects the whole batch once when the quota would be exceeded
3. Reports every rejection, not just the first
4. Catches duplicates within the same call
5. Never changes entry order on removal
"""

import pytest

from app.batch.errors import FileEntryNotFoundError, InvalidStatusTransitionError
from app.batch.models import FileCandidate, FileStatus, RejectionReason, format_file_size
from app.batch.registry import FileRegistry, counter_ids, uuid_ids
from app.batch.settings import BatchSettings, MAX_FILE_BYTES


def pdf(name: str, size: int = 1000) -> FileCandidate:
    return FileCandidate(name=name, size_bytes=size, payload=b"%PDF")


class TestRegistryIntake:
    """Tests for FileRegistry.intake()."""

    def setup_method(self):
        self.registry = FileRegistry(id_factory=counter_ids())

    def test_three_distinct_pdfs_scenario(self):
        result = self.registry.intake(
            [pdf("a.pdf", 10_240), pdf("b.pdf", 61_440), pdf("c.pdf", 122_880)],
            quota=100,
        )

        assert result.rejections == []
        assert [e.estimated_pages for e in self.registry.entries()] == [1, 2, 3]
        assert self.registry.totals().size_bytes == 194_560
        assert self.registry.totals().estimated_pages == 6
        assert self.registry.totals().count == 3

    def test_entries_created_pending_with_fresh_ids(self):
        result = self.registry.intake([pdf("a.pdf"), pdf("b.pdf")])

        assert [e.id for e in result.appended] == ["file-1", "file-2"]
        assert all(e.status == FileStatus.PENDING for e in result.appended)
        assert all(e.error is None for e in result.appended)

    def test_payload_carried_through(self):
        self.registry.intake([FileCandidate("a.pdf", 4, payload=b"%PDF")])
        assert self.registry.entries()[0].payload == b"%PDF"

    def test_same_file_twice_in_one_call_is_duplicate(self):
        result = self.registry.intake([pdf("a.pdf", 1000), pdf("a.pdf", 1000)])

        assert self.registry.count() == 1
        assert [r.reason for r in result.rejections] == [RejectionReason.DUPLICATE]

    def test_same_file_across_calls_is_duplicate(self):
        self.registry.intake([pdf("a.pdf", 1000)])
        result = self.registry.intake([pdf("a.pdf", 1000)])

        assert self.registry.count() == 1
        assert result.appended == []
        assert len(result.rejections) == 1
        assert result.rejections[0].reason == RejectionReason.DUPLICATE
        assert result.rejections[0].name == "a.pdf"

    def test_all_rejections_reported_in_arrival_order(self):
        result = self.registry.intake([
            pdf("notes.txt"),
            pdf("huge.pdf", MAX_FILE_BYTES + 1),
            pdf("ok.pdf"),
            pdf("ok.pdf"),
        ])

        assert [e.name for e in result.appended] == ["ok.pdf"]
        assert [(r.name, r.reason) for r in result.rejections] == [
            ("notes.txt", RejectionReason.NOT_PDF),
            ("huge.pdf", RejectionReason.TOO_LARGE),
            ("ok.pdf", RejectionReason.DUPLICATE),
        ]

    def test_rejected_file_does_not_block_its_duplicate(self):
        """A candidate that failed validation is not a known entry."""
        result = self.registry.intake([pdf("a.pdf", MAX_FILE_BYTES + 1), pdf("b.pdf")])
        assert [e.name for e in result.appended] == ["b.pdf"]

    def test_arrival_order_preserved_across_calls(self):
        self.registry.intake([pdf("a.pdf"), pdf("b.pdf")])
        self.registry.intake([pdf("c.pdf"), pdf("d.pdf")])

        assert [e.name for e in self.registry.entries()] == ["a.pdf", "b.pdf", "c.pdf", "d.pdf"]

    def test_empty_batch_is_noop(self):
        result = self.registry.intake([])
        assert result.appended == []
        assert result.rejections == []


class TestRegistryQuota:
    """Quota is checked against the full incoming batch."""

    def setup_method(self):
        self.registry = FileRegistry(settings=BatchSettings(max_files=3), id_factory=counter_ids())

    def test_batch_over_quota_rejected_atomically(self):
        self.registry.intake([pdf("a.pdf"), pdf("b.pdf")])
        before = self.registry.entries()

        result = self.registry.intake([pdf("c.pdf"), pdf("d.pdf")])

        assert self.registry.entries() == before
        assert result.appended == []
        assert len(result.rejections) == 1
        assert result.rejections[0].reason == RejectionReason.QUOTA_EXCEEDED
        assert result.rejections[0].name is None
        assert result.quota_exceeded

    def test_quota_counts_candidates_not_accepted_files(self):
        """Invalid candidates still count against the quota check."""
        result = self.registry.intake([pdf("a.pdf"), pdf("b.txt"), pdf("c.txt"), pdf("d.txt")])

        assert self.registry.count() == 0
        assert [r.reason for r in result.rejections] == [RejectionReason.QUOTA_EXCEEDED]

    def test_filling_to_exact_quota_allowed(self):
        result = self.registry.intake([pdf("a.pdf"), pdf("b.pdf"), pdf("c.pdf")])
        assert len(result.appended) == 3
        assert not result.quota_exceeded

    def test_explicit_quota_overrides_settings(self):
        result = self.registry.intake([pdf("a.pdf"), pdf("b.pdf")], quota=1)
        assert result.quota_exceeded
        assert self.registry.count() == 0

    @pytest.mark.parametrize("prior, incoming", [(0, 4), (1, 3), (2, 2), (3, 1)])
    def test_size_property(self, prior, incoming):
        """Registry grows by accepted count unless prior + incoming > quota."""
        self.registry.intake([pdf(f"prior-{i}.pdf") for i in range(prior)])
        result = self.registry.intake([pdf(f"new-{i}.pdf") for i in range(incoming)])

        assert self.registry.count() == prior
        assert len(result.rejections) == 1


class TestRegistryEdits:
    """Tests for remove(), clear() and totals()."""

    def setup_method(self):
        self.registry = FileRegistry(id_factory=counter_ids())
        self.registry.intake([pdf("a.pdf", 100), pdf("b.pdf", 200), pdf("c.pdf", 300)])

    def test_remove_keeps_order_of_remaining(self):
        removed = self.registry.remove("file-2")

        assert removed.name == "b.pdf"
        assert [e.name for e in self.registry.entries()] == ["a.pdf", "c.pdf"]

    def test_remove_unknown_id_raises(self):
        with pytest.raises(FileEntryNotFoundError) as exc_info:
            self.registry.remove("nope")
        assert exc_info.value.entry_id == "nope"
        assert self.registry.count() == 3

    def test_removed_file_can_be_added_again(self):
        self.registry.remove("file-1")
        result = self.registry.intake([pdf("a.pdf", 100)])

        assert len(result.appended) == 1
        assert [e.name for e in self.registry.entries()] == ["b.pdf", "c.pdf", "a.pdf"]

    def test_clear_empties_registry(self):
        self.registry.clear()
        assert self.registry.is_empty()
        assert self.registry.totals().count == 0

    def test_totals_recomputed_after_each_change(self):
        assert self.registry.totals().size_bytes == 600
        self.registry.remove("file-3")
        assert self.registry.totals().size_bytes == 300
        self.registry.intake([pdf("d.pdf", 1000)])
        assert self.registry.totals().size_bytes == 1300

    def test_human_size(self):
        assert self.registry.totals().human_size == "600 Bytes"

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (1536, "1.5 KB"),
        (50 * 1024 * 1024, "50 MB"),
        (1000 * 1024 ** 4, "1024000 GB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_entries_returns_copy(self):
        self.registry.entries().clear()
        assert self.registry.count() == 3


class TestRegistryStatus:
    """Server-driven status updates."""

    def setup_method(self):
        self.registry = FileRegistry(id_factory=counter_ids())
        self.registry.intake([pdf("a.pdf"), pdf("b.pdf")])

    def test_upload_lifecycle(self):
        self.registry.set_status("file-1", FileStatus.UPLOADING)
        entry = self.registry.set_status("file-1", FileStatus.UPLOADED)

        assert entry.status == FileStatus.UPLOADED
        assert self.registry.get("file-1").status == FileStatus.UPLOADED

    def test_error_keeps_reason(self):
        entry = self.registry.set_status("file-2", FileStatus.ERROR, "Upload rejected")
        assert entry.error == "Upload rejected"

    def test_error_reason_dropped_when_not_error(self):
        self.registry.set_status("file-2", FileStatus.ERROR, "Upload rejected")
        entry = self.registry.set_status("file-2", FileStatus.UPLOADING, "ignored")
        assert entry.error is None

    def test_uploaded_is_terminal(self):
        self.registry.set_status("file-1", FileStatus.UPLOADING)
        self.registry.set_status("file-1", FileStatus.UPLOADED)

        with pytest.raises(InvalidStatusTransitionError):
            self.registry.set_status("file-1", FileStatus.ERROR)

    def test_cannot_skip_uploading(self):
        with pytest.raises(InvalidStatusTransitionError):
            self.registry.set_status("file-1", FileStatus.UPLOADED)

    def test_status_update_keeps_position(self):
        self.registry.set_status("file-1", FileStatus.UPLOADING)
        assert [e.id for e in self.registry.entries()] == ["file-1", "file-2"]

    def test_unknown_entry_raises(self):
        with pytest.raises(FileEntryNotFoundError):
            self.registry.set_status("nope", FileStatus.UPLOADING)


class TestIdFactories:
    """Entry ID sources."""

    def test_counter_ids_are_sequential(self):
        ids = counter_ids("entry")
        assert [ids(), ids(), ids()] == ["entry-1", "entry-2", "entry-3"]

    def test_uuid_ids_are_unique(self):
        assert uuid_ids() != uuid_ids()

    def test_colliding_id_factory_refused(self):
        registry = FileRegistry(id_factory=lambda: "same")
        registry.intake([pdf("a.pdf")])
        with pytest.raises(ValueError, match="already in use"):
            registry.intake([pdf("b.pdf")])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
