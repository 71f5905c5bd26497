import pytest

from libcatalog.query import Q, collation_equal, collation_key
from libcatalog.query.compiler import DocumentSQLCompiler
from libcatalog.query.matcher import matches, sort_documents


def test_compile_exact_lookup_binds_json_path():
    sql, params = DocumentSQLCompiler(Q(author="a1")).compile_where()
    assert sql == 'json_extract("document", ?) = ?'
    assert params == ["$.author", "a1"]


def test_compile_contains_uses_json_each():
    sql, params = DocumentSQLCompiler(Q(genre__contains="g1")).compile_where()
    assert sql.startswith('EXISTS (SELECT 1 FROM json_each("document", ?)')
    assert params == ["$.genre", "g1"]


def test_compile_combined_and_negated():
    where = (Q(status="Available") | Q(status="Loaned")) & ~Q(book="b1")
    sql, params = DocumentSQLCompiler(where).compile_where()
    assert sql == (
        '((json_extract("document", ?) = ?) OR (json_extract("document", ?) = ?)) '
        'AND (NOT (json_extract("document", ?) = ?))'
    )
    assert params == ["$.status", "Available", "$.status", "Loaned", "$.book", "b1"]


def test_compile_iexact_and_ordering():
    compiler = DocumentSQLCompiler(Q(name__iexact="fantasy"), order_by=("-name", "id"))
    sql, params = compiler.compile_where()
    assert sql == 'json_extract("document", ?) = ? COLLATE CATALOG_NOCASE'
    order_sql, order_params = compiler.compile_order_by()
    assert order_sql == 'json_extract("document", ?) DESC, "id"'
    assert order_params == ["$.name"]


def test_invalid_lookup_and_field_names_rejected():
    with pytest.raises(ValueError):
        Q(name__startswith="F")
    with pytest.raises(ValueError):
        DocumentSQLCompiler(Q(**{"name')--": "x"})).compile_where()


def test_matcher_evaluates_lookups():
    document = {"name": "Fantasy", "genre": ["g1", "g2"], "year": 1990}
    assert matches(Q(name__iexact="FANTASY"), "x", document)
    assert matches(Q(genre__contains="g2"), "x", document)
    assert not matches(Q(genre__contains="g3"), "x", document)
    assert matches(Q(year__gte=1990) & Q(id="x"), "x", document)
    assert matches(Q(name="Horror") | Q(year__lt=2000), "x", document)
    assert not matches(~Q(name="Fantasy"), "x", document)
    assert matches(None, "x", document)


def test_sort_documents_orders_missing_values_first():
    rows = [("1", {"title": "B"}), ("2", {"title": None}), ("3", {"title": "A"})]
    assert [row[0] for row in sort_documents(rows, ("title",))] == ["2", "3", "1"]
    assert [row[0] for row in sort_documents(rows, ("-title",))] == ["1", "3", "2"]


def test_collation_ignores_case_but_not_accents():
    assert collation_equal("Science Fiction", "science FICTION")
    assert collation_equal("Straße", "STRASSE")
    assert not collation_equal("Café", "Cafe")
    # Composed and decomposed forms of the same letter are equal.
    assert collation_key("Caf\u00e9") == collation_key("Cafe\u0301")
