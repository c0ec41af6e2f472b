"""
Tests for the dataset writer, the Anki export and record validation.
"""

import json

import pytest

from lituk_scraper.main import main
from lituk_scraper.models import QuestionRecord
from lituk_scraper.scraper.exceptions import ResultWriteError
from lituk_scraper.utils.anki_export import export_anki
from lituk_scraper.utils.json_writer import ResultWriter
from lituk_scraper.utils.text_processor import TextProcessor
from lituk_scraper.utils.validation import RecordValidator, validate_records


@pytest.fixture
def records():
    return [
        QuestionRecord.create(
            question="Which TWO are British overseas territories?",
            options=["Falklands", "Ireland", "Gibraltar", "Iceland"],
            answers=["Falklands", "Gibraltar"],
            tip="Both are British overseas territories.",
            quiz_number=17,
        ),
        QuestionRecord.create(
            question="Is the UK a member of the Commonwealth?",
            options=["Yes", "No"],
            answers=["Yes"],
            tip="",
            quiz_number=2,
        ),
    ]


def test_output_uses_wire_keys(tmp_path, records):
    writer = ResultWriter(str(tmp_path / 'out' / 'questions.json'))

    path = writer.persist(records)

    data = json.loads(path.read_text(encoding='utf-8'))
    assert data[0] == {
        'question': "Which TWO are British overseas territories?",
        'options': ["Falklands", "Ireland", "Gibraltar", "Iceland"],
        'answers': ["Falklands", "Gibraltar"],
        'tip': "Both are British overseas territories.",
        'quizNumber': 17,
    }
    assert data[1]['tip'] == ""


def test_repeated_writes_are_byte_identical(tmp_path, records):
    writer = ResultWriter(str(tmp_path / 'questions.json'))

    first = writer.persist(records).read_bytes()
    second = writer.persist(records).read_bytes()

    assert first == second


def test_empty_result_writes_empty_array(tmp_path):
    writer = ResultWriter(str(tmp_path / 'questions.json'))

    assert json.loads(writer.persist([]).read_text(encoding='utf-8')) == []


def test_unwritable_destination_raises(tmp_path, records):
    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')
    writer = ResultWriter(str(blocker / 'questions.json'))

    with pytest.raises(ResultWriteError):
        writer.persist(records)


def test_dataset_loads_back(tmp_path, records):
    writer = ResultWriter(str(tmp_path / 'questions.json'))
    writer.persist(records)

    assert writer.load() == records


def test_non_ascii_text_is_kept(tmp_path):
    record = QuestionRecord.create("Who wrote “Ode to Joy”?", ["Schiller"], ["Schiller"], "", 3)
    writer = ResultWriter(str(tmp_path / 'questions.json'))

    assert "“Ode to Joy”" in writer.persist([record]).read_text(encoding='utf-8')


def test_anki_export_rows(tmp_path, records):
    output = tmp_path / 'anki.txt'

    count = export_anki(records, str(output), deck="Life in the UK")

    assert count == 2
    lines = output.read_text(encoding='utf-8').split('\n')
    assert lines[-1] == ''
    assert lines[0] == (
        '"Which TWO are British overseas territories?<br><br>Falklands<br>Ireland<br>Gibraltar<br>Iceland"\t'
        '"Falklands<br>Gibraltar"\t"Both are British overseas territories."\t"Life in the UK"'
    )
    assert lines[1].startswith('"Is the UK a member of the Commonwealth?<br><br>Yes<br>No"\t"Yes"\t""')


def test_validator_flags_answer_outside_options():
    record = QuestionRecord.create("Q?", ["A", "B"], ["C"], "", 5)

    ok, errors, _ = RecordValidator().validate_record(record)

    assert not ok
    assert any("doesn't match any option" in e for e in errors)


def test_validation_summary_reports_incomplete_quizzes(records):
    summary = validate_records(records)

    assert summary['total_questions'] == 2
    assert summary['valid_questions'] == 2
    assert summary['incomplete_quizzes'] == {2: 1, 17: 1}


@pytest.mark.parametrize("raw, expected", [
    ("  Answer A\n", "Answer A"),
    ("Two\xa0 words", "Two words"),
    ("", ""),
])
def test_normalize(raw, expected):
    assert TextProcessor.normalize(raw) == expected


def test_question_and_tip_cleaning():
    assert TextProcessor.clean_question_text(" 3. What is the capital?\n") == "What is the capital?"
    assert TextProcessor.clean_tip_text("Explanation:  London is the capital.") == "London is the capital."


async def test_anki_only_converts_existing_dataset(tmp_path, records, capsys, restore_logging):
    dataset = tmp_path / 'questions.json'
    ResultWriter(str(dataset)).persist(records)
    anki_file = tmp_path / 'anki.txt'
    settings = tmp_path / 'settings.json'
    settings.write_text(json.dumps({
        'logging': {'file': str(tmp_path / 'combined.log'), 'error_file': str(tmp_path / 'error.log')},
    }))

    code = await main([
        '--config', str(settings), '--anki-only',
        '--output', str(dataset), '--anki-output', str(anki_file),
    ])

    assert code == 0
    assert len(anki_file.read_text(encoding='utf-8').splitlines()) == 2
    assert "Exported 2 Anki notes" in capsys.readouterr().out
