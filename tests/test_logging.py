from wwtracker.logging import join_location_processor


def test_location_fields_are_joined():
    event = join_location_processor(
        None, "debug", {"event": "x", "area": "Dragon Roost Cavern", "detail": "First Room"}
    )
    assert event == {"event": "x", "location": "Dragon Roost Cavern - First Room"}


def test_area_alone_is_kept():
    event = join_location_processor(None, "info", {"event": "x", "area": "Outset Island"})
    assert event == {"event": "x", "area": "Outset Island"}
