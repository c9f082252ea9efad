from smtp_module.prometheus import ModuleMetrics


def test_metrics_render_counters():
    metrics = ModuleMetrics()
    metrics.inc_sent()
    metrics.inc_error("bad_data")
    metrics.inc_config(False)
    metrics.inc_config(True)

    output = metrics.generate_latest().decode()
    assert "smtp_module_sent_total 1.0" in output
    assert 'smtp_module_errors_total{kind="bad_data"} 1.0' in output
    assert 'smtp_module_config_total{result="error"} 1.0' in output
    assert 'smtp_module_config_total{result="ok"} 1.0' in output
    assert "smtp_module_configured 1.0" in output


def test_separate_registries_do_not_clash():
    first = ModuleMetrics()
    second = ModuleMetrics()
    first.inc_sent()
    assert "smtp_module_sent_total 0.0" in second.generate_latest().decode()
