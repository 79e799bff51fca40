"""Smoke test to verify the toolchain works."""


def test_import_led_circuit():
    """Verify the led_circuit package can be imported."""
    import led_circuit

    assert led_circuit.__version__


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import led_circuit.frames
    import led_circuit.playback
    import led_circuit.telemetry
    import led_circuit.track
    import led_circuit.web.app

    assert led_circuit.frames is not None
    assert led_circuit.playback is not None
    assert led_circuit.telemetry is not None
    assert led_circuit.track is not None
    assert led_circuit.web.app.app is not None
