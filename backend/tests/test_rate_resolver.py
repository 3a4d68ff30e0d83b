import pytest

from backend.core.settings import settings
from backend.models import SimulationInput
from backend.rules.rate_resolver import (
    UnknownStateError,
    calculate_adjusted_mva,
    get_interstate_rate,
    resolve_fiscal_rates,
)
from backend.rules.reference_data import NORTH_NORTHEAST_CENTER_WEST, SOUTH_SOUTHEAST, UF_LIST


@pytest.mark.parametrize("uf", [uf.sigla for uf in UF_LIST] + ["XX"])
def test_same_state_has_no_interstate_rate(uf):
    assert get_interstate_rate(uf, uf) == 0


def test_south_to_north_uses_seven_percent():
    assert get_interstate_rate("SP", "BA") == 7
    assert get_interstate_rate("rs", " pe ") == 7


def test_espirito_santo_is_grouped_with_destination_states():
    # ES is listed with the North/Northeast/Center-West states in the reference
    # tables, so the South/Southeast set holds six states.
    assert "ES" not in SOUTH_SOUTHEAST
    assert "ES" in NORTH_NORTHEAST_CENTER_WEST
    assert get_interstate_rate("SP", "ES") == 7
    assert get_interstate_rate("ES", "SP") == 12


def test_other_routes_use_twelve_percent():
    assert get_interstate_rate("BA", "SP") == 12
    assert get_interstate_rate("SP", "RJ") == 12
    assert get_interstate_rate("BA", "PE") == 12


def test_unknown_state_falls_back_to_default(capsys, monkeypatch):
    monkeypatch.setattr(settings, "LOG_LEVEL", "DEBUG")
    assert get_interstate_rate("SP", "XX") == 12
    assert "UF não reconhecida" in capsys.readouterr().out


def test_strict_resolution_rejects_unknown_state():
    with pytest.raises(UnknownStateError) as info:
        get_interstate_rate("ZZ", "SP", strict=True)
    assert info.value.codes == ["ZZ"]


@pytest.mark.parametrize("mva", [0, 20, 45.5, 100])
@pytest.mark.parametrize("intra", [12, 18, 20.5])
def test_adjusted_mva_identity_for_internal_operation(mva, intra):
    assert calculate_adjusted_mva(mva, 0, intra) == mva


def test_adjusted_mva_formula():
    assert calculate_adjusted_mva(40, 12, 18) == pytest.approx((1.4 * 0.88 / 0.82 - 1) * 100)
    assert calculate_adjusted_mva(40, 12, 18) == pytest.approx(50.2439, abs=1e-4)



@pytest.mark.parametrize("intra", [100, 120])
def test_adjusted_mva_falls_back_when_destination_rate_reaches_hundred(intra):
    assert calculate_adjusted_mva(40, 12, intra) == 40


def test_resolve_fiscal_rates_fills_from_ncm_and_route():
    inputs = SimulationInput(ncm_codigo="25232910", uf_origem="sp", uf_destino="ba", valor_compra=100)
    resolved = resolve_fiscal_rates(inputs)

    assert resolved.ncm_codigo == "2523.29.10"
    assert resolved.nome_produto == "Cimento Portland"
    assert resolved.mva_original == 20
    assert resolved.icms_interestadual == 7
    assert resolved.icms_interno_destino == 20.5
    assert resolved.mva == 40.37
    assert resolved.valor_compra == 100
    assert inputs.mva == 0


def test_resolve_fiscal_rates_keeps_product_name_and_defaults_intra_rate():
    inputs = SimulationInput(nome_produto="Meu cimento", mva_original=30, uf_origem="SP", uf_destino="XX")
    resolved = resolve_fiscal_rates(inputs, ncm_codigo="2523")

    assert resolved.nome_produto == "Meu cimento"
    assert resolved.mva_original == 20
    assert resolved.icms_interestadual == 12
    assert resolved.icms_interno_destino == 18
