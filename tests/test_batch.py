"""Tests for the batch orchestrator: all-pairs, match, skips and cancellation."""

import os
import shutil
import threading

import pytest

from image_similarity.batch import BatchOrchestrator
from image_similarity.comparator import PairComparator
from image_similarity.errors import DecodeError, DirectoryError, InvalidBufferError
from image_similarity.image_io import decode_image
from image_similarity.models import PixelBuffer


def _orchestrator(config, workers=1, **kwargs):
    return BatchOrchestrator(PairComparator(config), workers=workers, **kwargs)


class TestPairComparator:
    """Tests for the single-pair decode/describe/score path."""

    def test_same_file_scores_one(self, write_image, reference_image, config):
        path = write_image("ref.png", reference_image)
        result = PairComparator(config).compare(path, path)
        assert result.score == 1.0
        assert (result.source_a, result.source_b) == (path, path)

    def test_symmetric(self, write_image, red_square_image, blue_circle_image, config):
        a = write_image("a.png", red_square_image)
        b = write_image("b.png", blue_circle_image)
        comparator = PairComparator(config)
        assert comparator.compare(a, b).score == comparator.compare(b, a).score

    def test_decode_error_propagates(self, tmp_path, write_image, red_square_image, config):
        a = write_image("a.png", red_square_image)
        with pytest.raises(DecodeError):
            PairComparator(config).compare(a, str(tmp_path / "missing.png"))

    def test_custom_decoder(self, red_square_image, config):
        calls = []

        def decoder(path):
            calls.append(path)
            return PixelBuffer.from_array(red_square_image, source=path)

        result = PairComparator(config, decoder=decoder).compare("x", "y")
        assert result.score == 1.0
        assert calls == ["x", "y"]


class TestAllPairs:
    """Tests for all-pairs mode."""

    def test_every_unordered_pair_once(self, image_dir, config):
        report = _orchestrator(config).all_pairs(str(image_dir))
        pairs = [(e.source_a, e.source_b) for e in report.entries]
        assert len(pairs) == 10
        assert len(set(pairs)) == 10
        assert all(a < b for a, b in pairs)
        assert report.skipped == []
        assert report.candidates == 5

    def test_sorted_descending(self, image_dir, config):
        report = _orchestrator(config).all_pairs(str(image_dir))
        assert [e.rank_key for e in report.entries] == sorted(e.rank_key for e in report.entries)

    def test_resilient_to_corrupt_file(self, image_dir, config):
        (image_dir / "f_broken.png").write_bytes(b"\x89PNG garbage")
        report = _orchestrator(config, workers=3).all_pairs(str(image_dir))
        assert len(report.entries) == 10
        assert len(report.skipped) == 1
        assert report.skipped[0].source.endswith("f_broken.png")
        assert report.skipped[0].reason.startswith("DecodeError")
        assert not report.interrupted

    def test_pool_matches_inline(self, image_dir, config):
        inline = _orchestrator(config, workers=1).all_pairs(str(image_dir))
        pooled = _orchestrator(config, workers=4).all_pairs(str(image_dir))
        assert inline.entries == pooled.entries

    def test_repeated_runs_identical(self, image_dir, config):
        first = _orchestrator(config, workers=4).all_pairs(str(image_dir))
        second = _orchestrator(config, workers=4).all_pairs(str(image_dir))
        assert first.entries == second.entries

    def test_duplicate_ranks_first(self, image_dir, config):
        shutil.copy(str(image_dir / "c_green.png"), str(image_dir / "c_green_copy.png"))
        report = _orchestrator(config).all_pairs(str(image_dir))
        top = report.entries[0]
        assert top.score == 1.0
        assert {os.path.basename(top.source_a), os.path.basename(top.source_b)} == {
            "c_green.png", "c_green_copy.png"}

    def test_empty_directory(self, tmp_path, config):
        report = _orchestrator(config).all_pairs(str(tmp_path))
        assert report.entries == []
        assert report.skipped == []

    def test_singleton_directory(self, tmp_path, write_image, red_square_image, config):
        write_image("only.png", red_square_image)
        report = _orchestrator(config).all_pairs(str(tmp_path))
        assert report.entries == []

    def test_missing_directory_raises(self, tmp_path, config):
        with pytest.raises(DirectoryError):
            _orchestrator(config).all_pairs(str(tmp_path / "missing"))

    def test_invalid_buffer_skipped(self, image_dir, config):
        def decoder(path):
            if path.endswith("b_blue.png"):
                raise InvalidBufferError(f"Image with 2 channels is not supported yet ({path})")
            return decode_image(path)

        orchestrator = BatchOrchestrator(PairComparator(config, decoder=decoder), workers=2)
        report = orchestrator.all_pairs(str(image_dir))
        assert len(report.entries) == 6
        assert [os.path.basename(s.source) for s in report.skipped] == ["b_blue.png"]
        assert report.skipped[0].reason.startswith("InvalidBufferError")


class TestMatch:
    """Tests for one-vs-many mode."""

    def test_target_outside_directory(self, image_dir, write_image, red_square_image, config):
        target = write_image("target.png", red_square_image)
        report = _orchestrator(config).match(target, str(image_dir))
        assert len(report.entries) == 5
        assert all(e.source_a == target for e in report.entries)
        assert os.path.basename(report.entries[0].source_b) == "a_red.png"
        assert report.entries[0].score == 1.0

    def test_target_inside_directory_excluded(self, image_dir, config):
        target = str(image_dir / "b_blue.png")
        report = _orchestrator(config).match(target, str(image_dir))
        assert len(report.entries) == 4
        assert all(os.path.basename(e.source_b) != "b_blue.png" for e in report.entries)

    def test_target_excluded_by_resolved_path(self, image_dir, config, monkeypatch):
        monkeypatch.chdir(str(image_dir))
        report = _orchestrator(config).match("./b_blue.png", str(image_dir))
        assert len(report.entries) == 4

    def test_sorted_descending(self, image_dir, config):
        report = _orchestrator(config, workers=3).match(str(image_dir / "e_reference.png"),
                                                        str(image_dir))
        scores = [e.score for e in report.entries]
        assert scores == sorted(scores, reverse=True)

    def test_corrupt_candidate_skipped(self, image_dir, config):
        (image_dir / "zz.jpg").write_bytes(b"nope")
        report = _orchestrator(config).match(str(image_dir / "a_red.png"), str(image_dir))
        assert len(report.entries) == 4
        assert len(report.skipped) == 1

    def test_undecodable_target_raises(self, image_dir, tmp_path, config):
        with pytest.raises(DecodeError):
            _orchestrator(config).match(str(tmp_path / "missing.png"), str(image_dir))

    def test_empty_directory(self, tmp_path, write_image, red_square_image, config):
        target = write_image("target.png", red_square_image)
        empty = tmp_path / "empty"
        empty.mkdir()
        report = _orchestrator(config).match(target, str(empty))
        assert report.entries == []


class TestCancellation:
    """Tests for stopping a batch mid-run."""

    def test_cancel_before_start(self, image_dir, config):
        event = threading.Event()
        event.set()
        report = _orchestrator(config, cancel_event=event).all_pairs(str(image_dir))
        assert report.interrupted
        assert report.entries == []

    def test_partial_results_kept(self, image_dir, config):
        event = threading.Event()
        seen = []

        def decoder(path):
            seen.append(path)
            if len(seen) == 3:
                event.set()
            return decode_image(path)

        orchestrator = BatchOrchestrator(PairComparator(config, decoder=decoder),
                                         workers=1, cancel_event=event)
        report = orchestrator.all_pairs(str(image_dir))
        assert report.interrupted
        assert len(seen) == 3
        assert len(report.entries) == 3

    def test_pool_cancel_reports_completed_work(self, image_dir, config):
        orchestrator = _orchestrator(config, workers=2)
        orchestrator.cancel()
        report = orchestrator.all_pairs(str(image_dir))
        described = {e.source_a for e in report.entries} | {e.source_b for e in report.entries}
        assert len(described) <= 5
        if report.interrupted:
            assert len(report.entries) < 10
