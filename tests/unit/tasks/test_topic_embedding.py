"""Unit tests for paperpile_navigate.tasks.topic_embedding."""
import pytest

from paperpile_navigate.tasks.topic_embedding import TopicEmbeddingTask


@pytest.fixture
def task():
    return TopicEmbeddingTask()


def _paper(pid, title, summary, categories='["cs.LG"]'):
    return {"id": pid, "title": title, "summary": summary, "categories": categories}


@pytest.fixture
def two_topic_papers():
    """Three vision papers and three language papers sharing vocabulary within each group."""
    return [
        _paper(1, "Convolutional image classification", "Image convolutional networks classify pixels", '["cs.CV"]'),
        _paper(2, "Image segmentation networks", "Pixel segmentation with convolutional image features", '["cs.CV"]'),
        _paper(3, "Convolutional image detection", "Detecting objects from image pixels", '["cs.CV"]'),
        _paper(4, "Language translation transformers", "Translation of language tokens with transformers", '["cs.CL"]'),
        _paper(5, "Language modelling transformers", "Transformers predict language tokens", '["cs.CL"]'),
        _paper(6, "Question answering language", "Answering questions over language tokens", '["cs.CL"]'),
    ]


class TestTopicEmbeddingTask:
    def test_empty_input(self, task):
        assert task.execute([]) == {}

    @pytest.mark.parametrize("n", [1, 2, 3])
    def test_small_sets_evenly_spaced(self, task, n):
        papers = [_paper(i, f"Title {i}", "Summary") for i in range(n)]
        positions = task.execute(papers)
        assert positions == {i: pytest.approx((i + 1) / (n + 1)) for i in range(n)}

    def test_deterministic(self, task, two_topic_papers):
        first = task.execute(two_topic_papers)
        second = task.execute(list(two_topic_papers))
        assert first == second

    def test_positions_within_bounds(self, task, two_topic_papers):
        positions = task.execute(two_topic_papers)
        assert set(positions) == {1, 2, 3, 4, 5, 6}
        assert all(0.1 - 1e-9 <= x <= 0.9 + 1e-9 for x in positions.values())
        assert min(positions.values()) == pytest.approx(0.1)
        assert max(positions.values()) == pytest.approx(0.9)

    def test_topics_separate_along_axis(self, task, two_topic_papers):
        positions = task.execute(two_topic_papers)
        vision = [positions[i] for i in (1, 2, 3)]
        language = [positions[i] for i in (4, 5, 6)]
        assert max(vision) < min(language) or max(language) < min(vision)

    def test_small_vocabulary_falls_back_to_even_spacing(self, task):
        # No term appears in two documents, so the bounded vocabulary is empty
        papers = [
            _paper(1, "Alpha", "", "[]"),
            _paper(2, "Bravo", "", "[]"),
            _paper(3, "Charlie", "", "[]"),
            _paper(4, "Delta", "", "[]"),
        ]
        positions = task.execute(papers)
        assert positions == {i: pytest.approx(i / 5) for i in (1, 2, 3, 4)}

    def test_identical_documents_fall_back_to_even_spacing(self, task):
        # Every term is in every document, above the 90% document-frequency cap
        papers = [_paper(i, "Graph neural networks", "Message passing graph networks") for i in range(5)]
        positions = task.execute(papers)
        assert positions == {i: pytest.approx((i + 1) / 6) for i in range(5)}

    def test_vocabulary_bounded_by_document_frequency(self, task):
        df = {"everywhere": 10, "common": 5, "rare": 1, "pair": 2}
        vocab = task._build_vocabulary(df, 10)
        # max_df = floor(10 * 0.9) = 9, min_df = 2
        assert vocab == ["common", "pair"]

    def test_vocabulary_ties_keep_first_seen_order(self, task):
        df = {"b": 3, "a": 3, "c": 4}
        assert task._build_vocabulary(df, 10) == ["c", "b", "a"]
