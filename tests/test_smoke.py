"""Smoke test to verify the toolchain works."""


def test_import_route_animator():
    """Verify the route_animator package can be imported."""
    import route_animator

    assert route_animator is not None


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import route_animator.analysis
    import route_animator.export
    import route_animator.preview
    import route_animator.render
    import route_animator.services
    import route_animator.studio
    import route_animator.timeline
    import route_animator.track

    assert route_animator.track is not None
    assert route_animator.timeline is not None
    assert route_animator.analysis is not None
    assert route_animator.render is not None
    assert route_animator.export is not None
    assert route_animator.preview is not None
    assert route_animator.services is not None
    assert route_animator.studio is not None
