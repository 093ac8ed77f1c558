import pytest

from bigquery_orm.dialect.translator import DialectTranslator, translate
from bigquery_orm.models import QualifiedTableRef


@pytest.fixture
def translator(table_ref):
    return DialectTranslator(table_ref)


def test_from_target_is_fully_qualified(translator):
    # Arrange
    sql = "SELECT id FROM t WHERE id = :id"

    # Act
    result = translator.translate(sql)

    # Assert
    assert result == "SELECT id FROM `p.d.t` WHERE id = :id"


def test_join_target_is_fully_qualified(translator):
    sql = "SELECT * FROM other JOIN t ON other.id = t.id"

    assert translator.translate(sql) == "SELECT * FROM other JOIN `p.d.t` ON other.id = t.id"


def test_table_match_is_case_insensitive(translator):
    assert translator.translate("select * from T") == "select * from `p.d.t`"


def test_backticked_table_is_qualified(translator):
    assert translator.translate("SELECT * FROM `t`") == "SELECT * FROM `p.d.t`"


@pytest.mark.parametrize("sql", [
    "SELECT * FROM t_archive",
    "SELECT * FROM archive_t",
    "SELECT * FROM `t_archive`",
])
def test_table_name_substrings_are_not_rewritten(translator, sql):
    assert translator.translate(sql) == sql


def test_already_qualified_references_are_untouched(translator):
    assert translator.translate("SELECT * FROM `p.d.t`") == "SELECT * FROM `p.d.t`"
    assert translator.translate("SELECT * FROM d.t") == "SELECT * FROM d.t"


def test_dml_targets_are_qualified(translator):
    assert translator.translate("UPDATE `t` SET `name` = :set_name") == "UPDATE `p.d.t` SET `name` = :set_name"
    assert translator.translate("DELETE FROM `t` WHERE `id` = :pk_id") == "DELETE FROM `p.d.t` WHERE `id` = :pk_id"
    assert translator.translate("INSERT INTO t (`id`) VALUES (:ins_id)") == "INSERT INTO `p.d.t` (`id`) VALUES (:ins_id)"


def test_whitespace_and_comments_are_preserved(translator):
    sql = "SELECT *\n-- read from t\nFROM\n    t"

    assert translator.translate(sql) == "SELECT *\n-- read from t\nFROM\n    `p.d.t`"


def test_reserved_words_are_backticked(translator):
    assert translator.translate("SELECT key, name FROM t") == "SELECT `key`, name FROM `p.d.t`"


def test_reserved_word_quoting_keeps_original_case(translator):
    assert translator.translate("SELECT Index, PRIMARY FROM t") == "SELECT `Index`, `PRIMARY` FROM `p.d.t`"


def test_reserved_words_inside_identifiers_are_not_quoted(translator):
    sql = "SELECT keys, monkey, key_id, unique_count FROM t"

    assert translator.translate(sql) == "SELECT keys, monkey, key_id, unique_count FROM `p.d.t`"


def test_translation_is_idempotent(translator):
    sql = "SELECT key, lock, name FROM t JOIN other ON t.index = other.index"

    once = translator.translate(sql)

    assert translator.translate(once) == once
    assert once.count("`key`") == 1
    assert "``" not in once


def test_reserved_words_inside_string_literals_are_left_alone(translator):
    sql = "SELECT * FROM t WHERE note = 'key' AND label = 'FROM t'"

    assert translator.translate(sql) == "SELECT * FROM `p.d.t` WHERE note = 'key' AND label = 'FROM t'"


def test_placeholder_names_are_not_quoted(translator):
    sql = "SELECT * FROM t WHERE `key` = :key"

    assert translator.translate(sql) == "SELECT * FROM `p.d.t` WHERE `key` = :key"


def test_malformed_sql_passes_through_unchanged(translator):
    sql = "SELECT key FROM t WHERE name = 'unterminated"

    assert translator.translate(sql) == sql


def test_empty_sql_is_returned_as_is(translator):
    assert translator.translate("") == ""


def test_module_level_translate(table_ref):
    assert translate("SELECT * FROM t", table_ref) == "SELECT * FROM `p.d.t`"


@pytest.mark.parametrize("name", ["comment", "date", "view", "model", "filter", "partition", "range", "users"])
def test_keyword_table_names_are_qualified(name):
    table_ref = QualifiedTableRef(project_id="p", dataset_name="d", table_name=name)

    result = translate(f"SELECT {name}.x FROM {name} WHERE {name}.x = 1", table_ref)

    assert result == f"SELECT {name}.x FROM `p.d.{name}` WHERE {name}.x = 1"
