from backend.rules.reference_data import (
    NCM_DATABASE,
    NORTH_NORTHEAST_CENTER_WEST,
    SOUTH_SOUTHEAST,
    UF_LIST,
    find_ncm,
    get_uf,
    internal_icms_rate,
    is_known_state,
    search_ncm,
)


def test_tables_are_loaded():
    assert len(UF_LIST) == 27
    assert len(NCM_DATABASE) > 50
    assert SOUTH_SOUTHEAST == {"SP", "RJ", "MG", "PR", "SC", "RS"}
    assert not SOUTH_SOUTHEAST & NORTH_NORTHEAST_CENTER_WEST
    assert {uf.sigla for uf in UF_LIST} == SOUTH_SOUTHEAST | NORTH_NORTHEAST_CENTER_WEST


def test_find_ncm_accepts_dotted_and_digit_codes():
    dotted = find_ncm("2523.29.10")
    assert dotted is not None
    assert dotted.descricao == "Cimento Portland"
    assert dotted.mva_original == 20
    assert find_ncm("25232910") == dotted
    assert find_ncm("9999.99.99") is None
    assert find_ncm("") is None


def test_search_ncm_by_prefix_and_description():
    by_code = search_ncm("2523")
    assert {entry.codigo for entry in by_code} >= {"2523", "2523.29.10"}

    by_text = search_ncm("CIMENTO")
    assert any(entry.codigo == "2523.29.10" for entry in by_text)

    assert any(entry.codigo == "2522" for entry in search_ncm("construcao"))
    assert len(search_ncm("", limit=5)) == 5
    assert search_ncm("") == NCM_DATABASE


def test_uf_helpers():
    assert get_uf("sp").nome == "São Paulo"
    assert internal_icms_rate("SP") == 18
    assert internal_icms_rate("BA") == 20.5
    assert internal_icms_rate("XX") is None
    assert is_known_state(" df ")
    assert not is_known_state("XX")
