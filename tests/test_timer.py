from care.timer import BreathingTimer, phase_at, progress_bar


def test_box_breathing_phases_cycle_every_sixteen_seconds():
    assert [phase_at(s) for s in (0, 4, 8, 12, 16)] == ["Inhale", "Hold", "Exhale", "Hold", "Inhale"]
    assert phase_at(5, "sw") == "Shikilia"


def test_progress_bar_fills_twenty_blocks():
    assert progress_bar(0, 120) == "░" * 20
    assert progress_bar(60, 120) == "█" * 10 + "░" * 10
    assert progress_bar(120, 120) == "█" * 20


def test_render_matches_widget_format():
    assert BreathingTimer(120).render(0) == "🧘 Breathing Timer (2:00)\nPhase: Inhale\nRemaining: 2:00\n" + "░" * 20
    assert "Remaining: 1:55" in BreathingTimer(120).render(5)
