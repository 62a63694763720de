import pytest

from bjt.config import AnalysisConfig, DatasetSpec, parse_dataset_option


def test_analysis_config_rejects_inverted_domain():
    with pytest.raises(ValueError, match="inverted"):
        AnalysisConfig(fit_min=3.0, fit_max=1.0)


def test_analysis_config_accepts_single_point_domain():
    assert AnalysisConfig(fit_min=2.0, fit_max=2.0).fit_range == (2.0, 2.0)


def test_analysis_config_rejects_unknown_policy():
    with pytest.raises(ValueError):
        AnalysisConfig(on_malformed="ignore")


def test_parse_dataset_option():
    spec = parse_dataset_option("50:data/50.txt")
    assert spec.path == "data/50.txt"
    assert spec.base_current_ma == pytest.approx(0.05)
    assert spec.display_label == "Ib=50 µA"
    assert DatasetSpec("x.txt", 0.1, label="custom").display_label == "custom"

    with pytest.raises(ValueError):
        parse_dataset_option("data/50.txt")
