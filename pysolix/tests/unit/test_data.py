import pytest

from pysolix.data import (DataResponse, NoDataResponse, Login, ScenInfo, SiteHomepage,
                          decode_envelope)
from pysolix.exceptions import DecodeError


class TestEnvelope:
    def test_data_present_is_success(self):
        envelope = decode_envelope({"code": 0, "data": {"a": 1}, "msg": "success!"})
        assert envelope == DataResponse(0, {"a": 1}, "success!")

    def test_missing_data_is_failure(self):
        envelope = decode_envelope({"code": 10000, "msg": "invalid request"})
        assert envelope == NoDataResponse(10000, "invalid request")

    def test_null_data_is_failure(self):
        envelope = decode_envelope({"code": 26084, "data": None, "msg": "token expired"})
        assert isinstance(envelope, NoDataResponse)
        assert envelope.code == 26084

    def test_empty_data_is_still_success(self):
        assert isinstance(decode_envelope({"code": 0, "data": {}, "msg": ""}), DataResponse)

    @pytest.mark.parametrize("payload", [None, [], "text", {"msg": "no code"}, {"code": "x", "msg": ""}])
    def test_invalid_envelope(self, payload):
        with pytest.raises(DecodeError):
            decode_envelope(payload)


def test_login_decode():
    login = Login.from_dict({"auth_token": "tok", "token_expires_at": 1700003600,
                             "user_id": "uid", "email": "me@example.com"})
    assert login == Login("tok", 1700003600, "uid")


def test_login_missing_token():
    with pytest.raises(DecodeError, match="auth_token"):
        Login.from_dict({"token_expires_at": 1, "user_id": "uid"})


def test_scen_info_decode(scen_info_payload):
    scen = ScenInfo.from_dict(scen_info_payload)
    assert scen.home_load_power == 450
    assert scen.other_loads_power == 50
    assert scen.grid_info.grid_to_home_power == 150
    assert scen.home_info.charging_power == 12.5
    assert [s.unit for s in scen.statistics] == ["kwh", "kg", "€"]
    assert scen.statistics[0].total == 1234.56
    info = scen.solarbank_info
    assert info.solar_power_1 == 110
    assert info.total_battery_power == 0.7
    assert isinstance(info.total_charging_power, int)
    assert [b.device_sn for b in info.solarbank_list] == ["SB1", "SB2"]
    assert info.solarbank_list[0].photovoltaic_power == 420


@pytest.mark.parametrize("mutate,field", [
    (lambda d: d.update(home_load_power="n/a"), "home_load_power"),
    (lambda d: d.update(other_loads_power="1.5"), "other_loads_power"),
    (lambda d: d["grid_info"].pop("grid_to_home_power"), "grid_to_home_power"),
    (lambda d: d["home_info"].update(charging_power=""), "charging_power"),
    (lambda d: d["solarbank_info"]["solarbank_list"][1].update(battery_power="full"), "battery_power"),
    (lambda d: d["solarbank_info"].update(solarbank_list=None), "solarbank_list"),
    (lambda d: d["statistics"][2].update(total=None), "total"),
    (lambda d: d.update(home_load_power="1_000"), "home_load_power"),
    (lambda d: d.update(home_load_power=" 12 "), "home_load_power"),
    (lambda d: d.update(home_load_power="-5"), "home_load_power"),
    (lambda d: d.update(home_load_power="\uff11\uff12"), "home_load_power"),
    (lambda d: d["home_info"].update(charging_power="1_2.5"), "charging_power"),
    (lambda d: d["statistics"][0].update(total="1e3"), "total"),
])
def test_scen_info_rejects_whole_document(scen_info_payload, mutate, field):
    mutate(scen_info_payload)
    with pytest.raises(DecodeError, match=field):
        ScenInfo.from_dict(scen_info_payload)


def test_scen_info_accepts_signed_and_plain_numbers(scen_info_payload):
    scen_info_payload.update(home_load_power="+7", other_loads_power=3)
    scen_info_payload["home_info"].update(charging_power="-1.")
    scen_info_payload["statistics"][0].update(total=".5")
    scen = ScenInfo.from_dict(scen_info_payload)
    assert scen.home_load_power == 7
    assert scen.other_loads_power == 3
    assert scen.home_info.charging_power == -1.0
    assert scen.statistics[0].total == 0.5


def test_site_homepage_decode(site_homepage_payload):
    homepage = SiteHomepage.from_dict(site_homepage_payload)
    assert homepage.sites() == [("site-1", "Balcony"), ("site-2", "Garage")]


def test_site_homepage_empty():
    assert SiteHomepage.from_dict({"site_list": []}).sites() == []
