import logging

import pytest

from movielens2crowdrec.config import ConverterConfig
from movielens2crowdrec.entities import convert_entities, iter_entity_records
from movielens2crowdrec.errors import InputNotFoundError
from movielens2crowdrec.records import ConversionStats, EntityKind
from movielens2crowdrec.schemas import ML_1M, ML_100K


# ---------------------------------------------------------------------------
# iter_entity_records
# ---------------------------------------------------------------------------

def test_iter_entity_records_namespaces_each_stream(test_logger):
    users = list(
        iter_entity_records(["1|25|M|x|1", "12|30|F|y|2"], EntityKind.USER, ML_100K, logger=test_logger)
    )
    movies = list(
        iter_entity_records(["1|A", "12|B"], EntityKind.MOVIE, ML_100K, logger=test_logger)
    )

    assert [r.eid for r in users] == [10, 120]
    assert [r.eid for r in movies] == [11, 121]
    assert {r.etype for r in users} == {EntityKind.USER}
    assert {r.etype for r in movies} == {EntityKind.MOVIE}


def test_iter_entity_records_handles_crlf_and_blank_lines(test_logger):
    lines = ["3::M::25::12::55555\r\n", "\n", "   \n"]
    records = list(iter_entity_records(lines, EntityKind.USER, ML_1M, logger=test_logger))

    assert len(records) == 1
    assert records[0].properties == {
        "age": "25-34",
        "gender": "M",
        "occupation": "programmer",
        "zipCode": "55555",
    }


def test_iter_entity_records_skips_rows_without_numeric_id(test_logger, caplog):
    stats = ConversionStats()

    with caplog.at_level(logging.WARNING, logger=test_logger.name):
        records = list(
            iter_entity_records(["abc|1|M", "2|3|F"], EntityKind.USER, ML_100K, stats, test_logger)
        )

    assert [r.eid for r in records] == [20]
    assert stats.lines_skipped == 1
    assert "Skipping row without a numeric id" in caplog.text


def test_iter_entity_records_defaults_missing_fields(test_logger):
    (record,) = iter_entity_records(["9"], EntityKind.MOVIE, ML_100K, logger=test_logger)

    assert record.eid == 91
    assert record.properties == {"title": "", "release date": "", "imdbUrl": "", "genres": ""}


# ---------------------------------------------------------------------------
# convert_entities
# ---------------------------------------------------------------------------

def test_convert_entities_writes_users_then_movies(tmp_path, write_lines, test_logger):
    users = write_lines("users.dat", ["1::F::1::10::48067", "2::M::56::16::70072"])
    movies = write_lines("movies.dat", ["1::Toy Story (1995)::Animation|Children's|Comedy"])

    result = convert_entities(users, movies, tmp_path / "out", ML_1M, logger=test_logger)

    lines = (tmp_path / "out" / "entities.dat").read_text(encoding="utf-8").splitlines()
    assert lines == [
        'user\t10\t\t{"age":"Under 18","gender":"F","occupation":"K-12 student","zipCode":"48067"}\t',
        'user\t20\t\t{"age":"56+","gender":"M","occupation":"self-employed","zipCode":"70072"}\t',
        'movie\t11\t\t{"title":"Toy Story (1995)","genres":"Animation, Children\'s, Comedy"}\t',
    ]
    assert result.records_written == 3
    assert result.lines_skipped == 0
    assert result.output_path == tmp_path / "out" / "entities.dat"


def test_convert_entities_decodes_latin1_titles(tmp_path, write_lines, test_logger):
    users = write_lines("u.user", ["1|24|M|technician|85711"])
    movies = write_lines("u.item", ["1|Café Society|01-Jan-1995||url|" + "|".join(["0"] * 19)])

    convert_entities(users, movies, tmp_path, ML_100K, logger=test_logger)

    content = (tmp_path / "entities.dat").read_text(encoding="utf-8")
    assert '"title":"Café Society"' in content


def test_convert_entities_missing_input_creates_no_output(tmp_path, write_lines, test_logger):
    users = write_lines("u.user", ["1|24|M|technician|85711"])
    missing = tmp_path / "nope.item"

    with pytest.raises(InputNotFoundError) as exc_info:
        convert_entities(users, missing, tmp_path / "out", ML_100K, logger=test_logger)

    assert exc_info.value.path == missing
    assert exc_info.value.phase == "entities"
    assert not (tmp_path / "out" / "entities.dat").exists()


def test_convert_entities_logs_progress_at_interval(tmp_path, write_lines, test_logger, caplog):
    users = write_lines("u.user", [f"{i}|20|M|x|1" for i in range(1, 6)])
    movies = write_lines("u.item", ["1|A"])
    config = ConverterConfig(progress_interval=2)

    with caplog.at_level(logging.INFO, logger=test_logger.name):
        convert_entities(users, movies, tmp_path, ML_100K, config, test_logger)

    progress = [r for r in caplog.records if getattr(r, "event", None) == "write_progress"]
    # the single movie row never reaches the interval on its own pass
    assert [(r.etype, r.eid) for r in progress] == [("user", 20), ("user", 40)]


def test_blank_lines_count_as_skipped(test_logger):
    stats = ConversionStats()
    lines = ["1|25|M|x|1", "", "  ", "abc|1", "2|30|F|y|2"]

    records = list(iter_entity_records(lines, EntityKind.USER, ML_100K, stats, test_logger))

    assert len(records) == 2
    assert stats.lines_skipped == 3
    assert len(records) + stats.lines_skipped == len(lines)
