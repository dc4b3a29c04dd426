import pytest
from prometheus_client.parser import text_string_to_metric_families

from pysolix.data import ScenInfo
from pysolix.metrics import Metrics, SITE_GAUGES, SOLARBANK_GAUGES


def samples(text):
    """{(name, labels): value} for every sample in a rendered snapshot"""
    result = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            result[(sample.name, tuple(sorted(sample.labels.items())))] = sample.value
    return result


def labelsets(text, name):
    return [dict(labels) for (sample_name, labels) in samples(text) if sample_name == name]


@pytest.fixture(name="metrics")
def fixture_metrics():
    return Metrics()


@pytest.fixture(name="scen")
def fixture_scen(scen_info_payload):
    return ScenInfo.from_dict(scen_info_payload)


def test_empty_store_renders_help_and_type(metrics):
    text = metrics.render()
    assert "# HELP anker_solix_home_load_power Home load power" in text
    assert "# TYPE anker_solix_home_load_power gauge" in text
    assert not metrics.has_data


def test_update_projects_document(metrics, scen):
    metrics.update("site-1", scen)
    values = samples(metrics.render())
    site = (("site_id", "site-1"), ("unit", "W"))

    assert values[("anker_solix_home_load_power", site)] == 450
    assert values[("anker_solix_other_load_power", site)] == 50
    assert values[("anker_solix_grid_to_home_power", site)] == 150
    assert values[("anker_solix_photovoltaic_to_grid_power", site)] == 0
    assert values[("anker_solix_home_charging_power", site)] == 12.5
    assert values[("anker_solix_solar_power_3", site)] == 105
    assert values[("anker_solix_solarbank_total_battery_power", site)] == 0.7
    assert values[("anker_solix_solarbank_total_output_power", site)] == 500
    assert values[("anker_solix_statistics_total_power", (("site_id", "site-1"), ("unit", "kwh")))] == 1234.56
    assert values[("anker_solix_statistics_total_co2", (("site_id", "site-1"), ("unit", "kg")))] == 1230.3
    assert values[("anker_solix_statistics_total_money", (("site_id", "site-1"), ("unit", "€")))] == 370.37
    bank = (("device_sn", "SB2"), ("site_id", "site-1"), ("unit", "W"))
    assert values[("anker_solix_solarbank_output_power", bank)] == 200
    assert metrics.has_data


def test_every_gauge_is_exported(metrics, scen):
    metrics.update("site-1", scen)
    names = {name for name, _ in samples(metrics.render())}
    for name, _ in SITE_GAUGES + SOLARBANK_GAUGES:
        assert "anker_solix_" + name in names


def test_two_batteries_yield_two_device_sets_and_one_aggregate(metrics, scen):
    metrics.update("site-1", scen)
    text = metrics.render()

    devices = labelsets(text, "anker_solix_solarbank_battery_power")
    assert sorted(d["device_sn"] for d in devices) == ["SB1", "SB2"]
    totals = labelsets(text, "anker_solix_solarbank_total_battery_power")
    assert totals == [{"site_id": "site-1", "unit": "W"}]


def test_update_is_idempotent(metrics, scen):
    metrics.update("site-1", scen)
    first = metrics.render()
    metrics.update("site-1", scen)
    assert metrics.render() == first


def test_last_write_wins(metrics, scen_info_payload):
    metrics.update("site-1", ScenInfo.from_dict(scen_info_payload))
    scen_info_payload["home_load_power"] = "999"
    metrics.update("site-1", ScenInfo.from_dict(scen_info_payload))
    values = samples(metrics.render())
    assert values[("anker_solix_home_load_power", (("site_id", "site-1"), ("unit", "W")))] == 999


def test_missing_series_keep_last_value(metrics, scen_info_payload):
    metrics.update("site-1", ScenInfo.from_dict(scen_info_payload))
    scen_info_payload["solarbank_info"]["solarbank_list"].pop()
    scen_info_payload["statistics"] = scen_info_payload["statistics"][:1]
    metrics.update("site-1", ScenInfo.from_dict(scen_info_payload))

    text = metrics.render()
    devices = labelsets(text, "anker_solix_solarbank_battery_power")
    assert sorted(d["device_sn"] for d in devices) == ["SB1", "SB2"]
    assert labelsets(text, "anker_solix_statistics_total_money") == [{"site_id": "site-1", "unit": "€"}]


def test_sites_are_labelled_separately(metrics, scen):
    metrics.update("site-1", scen)
    metrics.update("site-2", scen)
    sites = {d["site_id"] for d in labelsets(metrics.render(), "anker_solix_home_load_power")}
    assert sites == {"site-1", "site-2"}


def test_stores_are_independent(scen):
    first = Metrics()
    second = Metrics()
    first.update("site-1", scen)
    assert labelsets(second.render(), "anker_solix_home_load_power") == []
