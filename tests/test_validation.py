import pytest

from contest_hub.db.schemas.contest import INT4_MAX
from contest_hub.errors import BadRequestError
from contest_hub.services.validation import validate_contest


@pytest.fixture
def candidate():
    return {
        "contestnumber": 1,
        "contestname": "Alpha",
        "conteststartdate": 1700000000,
        "contestduration": 300,
        "contestlastmileanswer": 300,
        "contestlastmilescore": 300,
        "contestlocalsite": 1,
        "contestpenalty": 0,
        "contestmaxfilesize": 1024,
        "contestactive": False,
        "contestmainsite": 1,
        "contestkeys": "",
        "contestunlockkey": "",
        "contestmainsiteurl": "",
    }


def test_valid_record(candidate):
    record = validate_contest(candidate)

    assert record.model_dump() == candidate


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("contestnumber", 0, "contestnumber must be greater than zero"),
        ("conteststartdate", 0, "conteststartdate must be greater than zero"),
        ("contestduration", -5, "contestduration must be greater than zero"),
        ("contestlocalsite", 0, "contestlocalsite must be greater than zero"),
        ("contestmainsite", 0, "contestmainsite must be greater than zero"),
        ("contestmaxfilesize", 0, "contestmaxfilesize must be greater than zero"),
        ("contestpenalty", -1, "contestpenalty must not be less than 0"),
        ("contestlastmileanswer", -1, "contestlastmileanswer must not be less than 0"),
        ("contestlastmilescore", -1, "contestlastmilescore must not be less than 0"),
        ("contestduration", INT4_MAX + 1, f"contestduration must not be greater than {INT4_MAX}"),
        ("contestname", "", "contestname must be longer than or equal to 1 characters"),
        ("contestname", "n" * 101, "contestname must be shorter than or equal to 100 characters"),
        ("contestunlockkey", "u" * 101, "contestunlockkey must be shorter than or equal to 100 characters"),
        ("contestmainsiteurl", "h" * 201, "contestmainsiteurl must be shorter than or equal to 200 characters"),
        ("contestpenalty", "10", "contestpenalty must be an integer number"),
        ("contestactive", 1, "contestactive must be a boolean value"),
    ],
)
def test_rule_violations(candidate, field, value, message):
    candidate[field] = value

    with pytest.raises(BadRequestError) as exc_info:
        validate_contest(candidate)

    assert exc_info.value.message == message


def test_first_violation_wins(candidate):
    candidate["contestduration"] = 0
    candidate["contestmaxfilesize"] = 0

    with pytest.raises(BadRequestError) as exc_info:
        validate_contest(candidate)

    assert exc_info.value.message == "contestduration must be greater than zero"


def test_optional_cutoffs_may_be_absent(candidate):
    candidate["contestlastmileanswer"] = None
    del candidate["contestlastmilescore"]

    record = validate_contest(candidate)

    assert record.contestlastmileanswer is None
    assert record.contestlastmilescore is None


def test_long_keys_are_allowed(candidate):
    candidate["contestkeys"] = "k" * 5000

    assert validate_contest(candidate).contestkeys == candidate["contestkeys"]
