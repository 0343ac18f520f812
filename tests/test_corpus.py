import random

import pytest

from dnsFlail.generator.corpus import EmptyCorpusError, NameCorpus


def test_from_lines_trims_and_drops_blank_lines():
    corpus = NameCorpus.from_lines(["example.com", "", "  test.org  ", "   "])
    assert corpus.names == ("example.com", "test.org")
    assert len(corpus) == 2


def test_load_reads_names_file(names_file):
    corpus = NameCorpus.load(names_file)
    assert list(corpus) == ["example.com", "test.org"]


def test_load_all_blank_file_raises(tmp_path):
    path = tmp_path / "blank.txt"
    path.write_text("\n   \n\t\n", encoding="utf-8")
    with pytest.raises(EmptyCorpusError):
        NameCorpus.load(path)


def test_from_lines_empty_raises():
    with pytest.raises(EmptyCorpusError):
        NameCorpus.from_lines([])


def test_load_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        NameCorpus.load(tmp_path / "missing.txt")


def test_sample_only_returns_corpus_members():
    corpus = NameCorpus.from_lines([" a.example ", "b.example", "", "c.example"])
    rng = random.Random(1234)
    drawn = {corpus.sample(rng) for _ in range(500)}
    assert drawn <= {"a.example", "b.example", "c.example"}
    # 500 draws over three names with replacement
    assert drawn == {"a.example", "b.example", "c.example"}


def test_sample_is_deterministic_for_seeded_rng():
    corpus = NameCorpus.from_lines(f"host{i}.example" for i in range(50))
    rng_a, rng_b = random.Random(99), random.Random(99)
    assert [corpus.sample(rng_a) for _ in range(20)] == [corpus.sample(rng_b) for _ in range(20)]


def test_single_entry_corpus_always_samples_it():
    corpus = NameCorpus(["only.example"])
    rng = random.SystemRandom()
    assert all(corpus.sample(rng) == "only.example" for _ in range(10))
