"""
Unit tests for question bank loading.
"""

import json

import pytest

from quizcore.core.errors import QuestionBankError
from quizcore.core.question import Choice, Difficulty
from quizcore.delivery.question_bank import (
    QuestionBank,
    QuestionRecord,
    load_bank_dir,
    transform_record,
)


def record(**overrides):
    data = {
        "id": "routing-001",
        "question": "What is the default administrative distance of OSPF?",
        "options": {"A": "90", "B": "100", "C": "110", "D": "120"},
        "answer": "C",
    }
    data.update(overrides)
    return QuestionRecord.model_validate(data)


class TestTransformRecord:
    """Record defaults and explanation fallback."""

    def test_defaults(self):
        question = transform_record(record())

        assert question.topic == "routing"
        assert question.difficulty == Difficulty.MEDIUM
        assert question.mastery == 0
        assert question.correct == Choice.C

    def test_topic_without_prefix(self):
        assert transform_record(record(id="standalone")).topic == "standalone"
        assert transform_record(record(id="-001")).topic == "General"

    def test_single_explanation_shared(self):
        question = transform_record(record(explanation="OSPF uses 110."))
        assert {question.explanation_for(c) for c in Choice} == {"OSPF uses 110."}

    def test_no_explanation(self):
        question = transform_record(record())
        assert question.explanation_for(Choice.B) == "Explanation for option B"

    def test_per_choice_explanations(self):
        question = transform_record(
            record(explanation="fallback", explanations={"A": "EIGRP", "C": "OSPF"})
        )
        assert question.explanation_for(Choice.A) == "EIGRP"
        assert question.explanation_for(Choice.C) == "OSPF"
        assert question.explanation_for(Choice.B) == "fallback"

    def test_unknown_difficulty_falls_back(self):
        assert transform_record(record(difficulty="extreme")).difficulty == Difficulty.MEDIUM
        assert transform_record(record(difficulty="HARD")).difficulty == Difficulty.HARD

    def test_mastery_clamped(self):
        assert transform_record(record(mastery=150)).mastery == 100
        assert transform_record(record(mastery=-3)).mastery == 0


class TestQuestionRecord:
    """Validation."""

    def test_answer_normalized(self):
        assert record(answer=" b ").answer == Choice.B

    def test_missing_option_rejected(self):
        with pytest.raises(ValueError):
            record(options={"A": "1", "B": "2", "C": "3"})

    def test_bad_answer_rejected(self):
        with pytest.raises(ValueError):
            record(answer="E")


class TestQuestionBank:
    """Loading from dicts and files."""

    def test_from_dict(self, sample_bank_dict):
        bank = QuestionBank.from_dict(sample_bank_dict)

        assert bank.cluster == "Networking"
        assert bank.version == "2.1"
        assert [q.id for q in bank.questions] == ["osi-001", "ip-001"]
        assert bank.questions[0].mastery == 20
        assert bank.questions[1].correct == Choice.B
        assert bank.questions[1].topic == "ip"

    def test_invalid_and_duplicate_records_skipped(self, sample_bank_dict):
        sample_bank_dict["questions"].append({"id": "broken"})
        sample_bank_dict["questions"].append(dict(sample_bank_dict["questions"][0]))

        bank = QuestionBank.from_dict(sample_bank_dict)

        assert len(bank.questions) == 2

    def test_load_file(self, tmp_path, sample_bank_dict):
        del sample_bank_dict["cluster"]
        path = tmp_path / "ccna.json"
        path.write_text(json.dumps(sample_bank_dict), encoding="utf-8")

        bank = QuestionBank.load(path)

        assert bank.cluster == "ccna"
        assert len(bank.questions) == 2

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(QuestionBankError):
            QuestionBank.load(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(QuestionBankError):
            QuestionBank.load(tmp_path / "missing.json")

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(QuestionBankError):
            QuestionBank.load(path)

    def test_load_bank_dir(self, tmp_path, sample_bank_dict):
        (tmp_path / "a.json").write_text(json.dumps(sample_bank_dict), encoding="utf-8")
        (tmp_path / "b.json").write_text("oops", encoding="utf-8")

        banks = load_bank_dir(tmp_path)

        assert list(banks) == ["Networking"]

    def test_load_bank_dir_missing(self, tmp_path):
        assert load_bank_dir(tmp_path / "nowhere") == {}
