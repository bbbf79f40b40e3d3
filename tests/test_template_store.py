"""TemplateStore loading, lookup and filtering tests.

Expected counts (from the packaged catalog):
    11 templates — CBT 3, ERP 2, DBT 2, CBT-J 2, SUD 2
    8 problem domains
"""

import pytest

from stepladder_worksheets.registry import TemplateStore, filter_templates


# =====================================================================
# Loading
# =====================================================================


def test_store_loads_all_templates(store):
    assert len(store.templates) == 11, (
        f"Expected 11 templates, got {len(store.templates)}"
    )
    assert len(store.by_id) == 11


def test_modality_counts(store):
    counts = {m: len(ts) for m, ts in store.by_modality.items()}
    assert counts == {"CBT": 3, "ERP": 2, "DBT": 2, "CBT-J": 2, "SUD": 2}


def test_catalog_order_follows_modality_files(store):
    """cbt.yaml loads first, sud.yaml last."""
    assert store.templates[0].id == "cbt-thought-record"
    assert store.templates[-1].modality == "SUD"


def test_every_field_type_is_used(store):
    used = {f.type for t in store.templates for f in t.fields}
    assert used == {
        "text", "textarea", "number", "rating_0_10", "checkbox",
        "checkbox_group", "select", "multi_select", "date", "time", "likert",
    }


def test_missing_catalog_dir_raises(tmp_path):
    s = TemplateStore(tmp_path / "nope")
    with pytest.raises(FileNotFoundError):
        s.load()


def test_duplicate_template_id_raises(tmp_path):
    entry = (
        "- id: dup\n"
        "  title: Dup\n"
        "  modality: CBT\n"
        "  modules: []\n"
        "  problem_domains: []\n"
        "  fields:\n"
        "    - {id: x, label: X, type: text}\n"
    )
    (tmp_path / "cbt.yaml").write_text(entry)
    (tmp_path / "extra.yaml").write_text(entry)
    with pytest.raises(ValueError, match="Duplicate"):
        TemplateStore(tmp_path).load()


def test_malformed_template_raises(tmp_path):
    (tmp_path / "cbt.yaml").write_text(
        "- id: bad\n  title: Bad\n  modality: CBT\n  fields: []\n"
    )
    with pytest.raises(ValueError, match="malformed"):
        TemplateStore(tmp_path).load()


def test_non_list_file_raises(tmp_path):
    (tmp_path / "cbt.yaml").write_text("id: single\n")
    with pytest.raises(ValueError, match="expected a list"):
        TemplateStore(tmp_path).load()


# =====================================================================
# Lookup
# =====================================================================


def test_get_by_id_identity(store):
    """Every template comes back unchanged by id."""
    for t in store.templates:
        assert store.get_by_id(t.id) is t


def test_get_by_id_missing(store):
    assert store.get_by_id("does-not-exist") is None


def test_get_by_modality(store):
    erp = store.get_by_modality("ERP")
    assert [t.id for t in erp] == ["erp-exposure-hierarchy", "erp-exposure-run"]
    assert store.get_by_modality("EMDR") == []


def test_get_by_modality_returns_copy(store):
    store.get_by_modality("CBT").clear()
    assert len(store.get_by_modality("CBT")) == 3


def test_list_domains_sorted_and_unique(store):
    domains = store.list_domains()
    assert domains == sorted(set(domains))
    assert domains == [
        "Anxiety", "Depression", "Emotion Dysregulation", "Insomnia",
        "Low Self-Esteem", "OCD", "Self-Harm", "Substance Use",
    ]


# =====================================================================
# Filtering
# =====================================================================


class TestFilter:

    def test_modality_exact_match_in_order(self, store):
        result = filter_templates(store.templates, "ERP", [], "")
        expected = [t for t in store.templates if t.modality == "ERP"]
        assert result == expected

    @pytest.mark.parametrize("modality", ["All", None, ""])
    def test_all_sentinel_disables_modality(self, store, modality):
        assert filter_templates(store.templates, modality) == list(store.templates)

    def test_domain_across_modalities(self, store):
        result = filter_templates(store.templates, "All", ["Depression"], "")
        assert [t.id for t in result] == [
            "cbt-thought-record",
            "cbt-behavioral-activation-log",
            "cbt-cognitive-distortions",
            "dbt-diary-card",
        ]
        assert all("Depression" in t.problem_domains for t in result)

    def test_domains_use_or(self, store):
        result = filter_templates(store.templates, "All", ["Insomnia", "OCD"])
        assert {t.modality for t in result} == {"CBT-J", "ERP"}
        assert len(result) == 4

    def test_search_is_case_insensitive(self, store):
        result = filter_templates(store.templates, search_term="THOUGHT")
        ids = [t.id for t in result]
        assert "cbt-thought-record" in ids
        # matched through the description
        assert "cbt-cognitive-distortions" in ids

    def test_search_matches_modules_and_domains(self, store):
        by_module = filter_templates(store.templates, search_term="relapse")
        assert [t.id for t in by_module] == ["sud-craving-log"]
        by_domain = filter_templates(store.templates, search_term="self-harm")
        assert {t.id for t in by_domain} == {"dbt-diary-card", "dbt-chain-analysis"}

    def test_dimensions_combine_with_and(self, store):
        result = store.filter("CBT", ["Anxiety"], "distortion")
        assert [t.id for t in result] == ["cbt-cognitive-distortions"]
        assert store.filter("ERP", ["Depression"]) == []

    def test_blank_search_ignored(self, store):
        assert store.filter(search_term="   ") == list(store.templates)

    def test_no_match(self, store):
        assert store.filter(search_term="zzz-not-a-worksheet") == []


def test_search_term_matched_as_typed(store):
    """Only a blank term is ignored; surrounding spaces are part of the match."""
    assert [t.id for t in store.filter(search_term="stimulus")] == ["cbtj-stimulus-control-plan"]
    assert store.filter(search_term="  stimulus") == []


# =====================================================================
# Immutability
# =====================================================================


class TestCatalogImmutable:

    def test_store_collections_are_read_only(self, store):
        with pytest.raises(AttributeError):
            store.templates.append(store.templates[0])
        with pytest.raises(TypeError):
            store.by_id["new"] = store.templates[0]
        with pytest.raises(TypeError):
            store.by_modality["CBT"] = ()
        with pytest.raises(AttributeError):
            store.by_modality["CBT"].clear()

    def test_template_lists_are_tuples(self, store):
        template = store.get_by_id("cbt-thought-record")
        assert isinstance(template.modules, tuple)
        assert isinstance(template.problem_domains, tuple)
        assert isinstance(template.fields, tuple)
        emotions = template.get_field("emotions")
        assert isinstance(emotions.options, tuple)
