"""
Tests for SNMP server brand detection.
"""

from snmp_platform.detection.brand import (
    UNIVERSAL_TEMPLATE,
    ServerBrandInfo,
    SnmpSystemInfo,
    best_match,
    detect_server_brand,
    generate_server_monitoring_advice,
    get_recommended_server_config,
)


class TestDetection:
    """Test rule scoring and ranking."""

    def test_dell_ranks_above_generic(self):
        info = SnmpSystemInfo(
            sys_descr="Dell PowerEdge R740 Linux Server",
            sys_object_id="1.3.6.1.4.1.674.10892.5",
        )
        results = detect_server_brand(info)

        assert [r.brand for r in results] == ["Dell", "Generic"]
        assert results[0].confidence == 70
        assert results[0].management_interface == "iDRAC"
        assert results[0].recommended_template == "server-dell-idrac"
        assert results[0].detection_method == "matched 2/2 detection rules"
        assert results[1].confidence == 30
        assert results[1].detection_method == "matched 1/1 detection rules"

    def test_ties_keep_rule_order(self):
        results = detect_server_brand(SnmpSystemInfo(sys_descr="Dell PowerEdge Server"))
        assert [(r.brand, r.confidence) for r in results] == [("Dell", 30), ("Generic", 30)]

    def test_confidence_capped(self):
        info = SnmpSystemInfo(
            sys_descr="Supermicro X11",
            sys_object_id="1.3.6.1.4.1.10876.2.1.1",
            vendor_oid="1.3.6.1.4.1.10876",
        )
        assert best_match(info).confidence == 90

    def test_oid_prefix_matches_whole_arcs(self):
        results = detect_server_brand(SnmpSystemInfo(vendor_oid="1.3.6.1.4.1.232"))
        assert [r.brand for r in results] == ["HP/HPE"]

    def test_ibm_uses_universal_template(self):
        result = best_match(SnmpSystemInfo(vendor_oid="1.3.6.1.4.1.2"))
        assert result.brand == "IBM"
        assert result.recommended_template == UNIVERSAL_TEMPLATE

    def test_case_insensitive_sys_descr(self):
        assert best_match(SnmpSystemInfo(sys_descr="inspur nf5280m6")).brand == "Inspur"

    def test_no_match_defaults_to_generic(self):
        result = best_match(SnmpSystemInfo(sys_descr="Cisco IOS Software"))
        assert result.brand == "Generic"
        assert result.confidence == 0
        assert detect_server_brand(SnmpSystemInfo(sys_descr="Cisco IOS Software")) == []

    def test_aliases(self):
        info = SnmpSystemInfo.model_validate({"sysDescr": "HP ProLiant DL380", "sysObjectID": "1.3.6.1.4.1.232.9.4.10"})
        assert info.sys_object_id == "1.3.6.1.4.1.232.9.4.10"
        assert best_match(info).to_api()["recommendedTemplate"] == "server-hp-ilo"
        assert SnmpSystemInfo().is_empty()


class TestRecommendations:
    """Test template recommendations and advice."""

    def test_recommended_config(self):
        config = get_recommended_server_config(best_match(SnmpSystemInfo(sys_descr="Lenovo ThinkSystem SR650")))
        assert config["templateId"] == "server-lenovo-xcc"
        assert config["features"]
        assert config["requirements"]

    def test_unknown_template_falls_back(self):
        info = ServerBrandInfo(
            brand="Acme",
            management_interface="BMC",
            recommended_template="server-acme",
            confidence=10,
            detection_method="manual",
        )
        assert get_recommended_server_config(info)["templateId"] == UNIVERSAL_TEMPLATE

    def test_advice(self):
        results = detect_server_brand(
            SnmpSystemInfo(sys_descr="Dell iDRAC HP iLO Supermicro Linux Server")
        )
        advice = generate_server_monitoring_advice(results)

        assert advice["primaryRecommendation"]["brand"] == results[0].brand
        assert len(advice["alternativeOptions"]) == 2
        assert len(advice["configurationSteps"]) == 6
        assert advice["troubleshootingTips"]

    def test_advice_without_results(self):
        advice = generate_server_monitoring_advice([])
        assert advice["primaryRecommendation"] is None
        assert advice["alternativeOptions"] == []
