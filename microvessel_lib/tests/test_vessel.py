"""
Tests for vessel construction, ordering and editing.
"""

import pytest
from microvessel_lib.core.network import VesselNetwork
from microvessel_lib.core.vessel import SegmentLocation
from microvessel_lib.core.errors import StructuralError


def _row(network, xs):
    return [network.add_node((float(x), 0.0, 0.0)) for x in xs]


def test_vessel_from_nodes():
    network = VesselNetwork()
    nodes = _row(network, [0, 1, 2])

    vessel = network.add_vessel_from_nodes(nodes, radius=5.0)

    assert vessel.get_number_of_segments() == 2
    assert vessel.get_number_of_nodes() == 3
    assert vessel.get_start_node() is nodes[0]
    assert vessel.get_end_node() is nodes[2]
    assert vessel.get_length() == pytest.approx(2.0)
    assert vessel.get_radius() == pytest.approx(5.0)
    for seg in vessel.get_segments():
        assert seg.vessel_id == vessel.id


def test_vessel_needs_two_nodes():
    network = VesselNetwork()
    nodes = _row(network, [0])

    with pytest.raises(StructuralError, match="Insufficient number of nodes"):
        network.add_vessel_from_nodes(nodes)


def test_vessel_radius_is_average():
    network = VesselNetwork()
    a, b, c = _row(network, [0, 1, 2])
    s0 = network.add_segment(a, b, radius=1.0)
    s1 = network.add_segment(b, c, radius=3.0)

    vessel = network.add_vessel([s0, s1])

    assert vessel.get_radius() == pytest.approx(2.0)

    vessel.set_radius(4.0)
    assert [seg.radius for seg in vessel.get_segments()] == [4.0, 4.0]


def test_segments_out_of_order_rejected():
    network = VesselNetwork()
    a, b, c, d = _row(network, [0, 1, 2, 3])
    ab = network.add_segment(a, b)
    cd = network.add_segment(c, d)

    with pytest.raises(StructuralError, match="not attached in the correct order"):
        network.add_vessel([ab, cd])

    # Failed construction leaves segments unowned
    assert ab.vessel_id is None
    assert cd.vessel_id is None


def test_closed_loop_rejected():
    """A segment touching a non-neighbour would make the vessel branch or loop."""
    network = VesselNetwork()
    a = network.add_node((0, 0, 0))
    b = network.add_node((1, 0, 0))
    c = network.add_node((0, 1, 0))
    ab = network.add_segment(a, b)
    bc = network.add_segment(b, c)
    ca = network.add_segment(c, a)

    with pytest.raises(StructuralError, match="not correctly connected"):
        network.add_vessel([ab, bc, ca])


def test_node_order_follows_reversed_first_segment():
    """A first segment stored end-to-start still yields a start-to-end node list."""
    network = VesselNetwork()
    a, b, c = _row(network, [0, 1, 2])
    ba = network.add_segment(b, a)
    bc = network.add_segment(b, c)

    vessel = network.add_vessel([ba, bc])

    assert vessel.get_nodes() == [a, b, c]
    assert vessel.get_start_node() is a
    assert vessel.get_end_node() is c


def test_node_index_out_of_range():
    network = VesselNetwork()
    vessel = network.add_vessel_from_nodes(_row(network, [0, 1]))

    assert vessel.get_node(1) is vessel.get_end_node()
    with pytest.raises(StructuralError, match="Out of bounds node index"):
        vessel.get_node(2)
    with pytest.raises(StructuralError):
        vessel.get_segment(1)


def test_add_segment_to_single_segment_vessel():
    network = VesselNetwork()
    a, b, c, d = _row(network, [0, 1, 2, -1])
    vessel = network.add_vessel_from_nodes([a, b])

    vessel.add_segment(network.add_segment(b, c))
    assert vessel.get_nodes() == [a, b, c]

    vessel.add_segment(network.add_segment(d, a))
    assert vessel.get_nodes() == [d, a, b, c]
    assert vessel.get_length() == pytest.approx(3.0)


def test_add_segment_refreshes_cached_nodes():
    network = VesselNetwork()
    a, b, c = _row(network, [0, 1, 2])
    vessel = network.add_vessel_from_nodes([a, b])
    assert vessel.get_end_node() is b

    vessel.add_segment(network.add_segment(b, c))

    assert vessel.get_end_node() is c
    assert vessel.get_number_of_nodes() == 3


def test_add_segment_must_touch_an_end():
    network = VesselNetwork()
    a, b, c, x, y = _row(network, [0, 1, 2, 5, 6])
    vessel = network.add_vessel_from_nodes([a, b, c])
    stray = network.add_segment(x, y)

    with pytest.raises(StructuralError, match="does not coincide"):
        vessel.add_segment(stray)

    assert vessel.get_number_of_segments() == 2
    assert stray.vessel_id is None


def test_add_segments_front_to_front():
    """A chain starting at the vessel's start node is reversed and prepended."""
    network = VesselNetwork()
    a, b, c, d, e = _row(network, [0, 1, 2, -1, -2])
    vessel = network.add_vessel_from_nodes([a, b, c])
    ad = network.add_segment(a, d)
    de = network.add_segment(d, e)

    vessel.add_segments([ad, de])

    assert vessel.get_nodes() == [e, d, a, b, c]
    assert vessel.segment_ids[:2] == [de.id, ad.id]


def test_add_segments_back_to_back():
    """A chain ending at the vessel's end node is reversed and appended."""
    network = VesselNetwork()
    a, b, c, f, g = _row(network, [0, 1, 2, 4, 3])
    vessel = network.add_vessel_from_nodes([a, b, c])
    fg = network.add_segment(f, g)
    gc = network.add_segment(g, c)

    vessel.add_segments([fg, gc])

    assert vessel.get_nodes() == [a, b, c, g, f]
    assert vessel.get_end_node() is f


def test_add_segments_appends_in_order():
    network = VesselNetwork()
    a, b, c, d = _row(network, [0, 1, 2, 3])
    vessel = network.add_vessel_from_nodes([a, b])

    vessel.add_segments([network.add_segment(b, c), network.add_segment(c, d)])

    assert vessel.get_nodes() == [a, b, c, d]


def test_add_segments_not_touching_rejected():
    network = VesselNetwork()
    a, b, x, y, z = _row(network, [0, 1, 5, 6, 7])
    vessel = network.add_vessel_from_nodes([a, b])
    chain = [network.add_segment(x, y), network.add_segment(y, z)]

    with pytest.raises(StructuralError, match="do not coincide"):
        vessel.add_segments(chain)


def test_divide_segment_at_midpoint():
    network = VesselNetwork()
    a = network.add_node((0, 0, 0), is_input=True)
    b = network.add_node((1, 0, 0))
    vessel = network.add_vessel_from_nodes([a, b], radius=2.0)
    vessel.flow_properties.flow_rate = 3.0
    original_id = vessel.segment_ids[0]

    new_node = vessel.divide_segment((0.5, 0.0, 0.0))

    assert vessel.get_number_of_nodes() == 3
    assert vessel.get_number_of_segments() == 2
    assert vessel.get_length() == pytest.approx(1.0)
    assert vessel.get_node(1) is new_node
    assert new_node.position.to_tuple() == pytest.approx((0.5, 0.0, 0.0))
    assert not new_node.flow_properties.is_input_node
    assert original_id not in network.segments
    for seg in vessel.get_segments():
        assert seg.radius == pytest.approx(2.0)
        assert seg.flow_properties.flow_rate == pytest.approx(3.0)


def test_divide_segment_at_end_returns_existing_node():
    network = VesselNetwork()
    a, b = _row(network, [0, 1])
    vessel = network.add_vessel_from_nodes([a, b])
    num_nodes = len(network.nodes)

    node = vessel.divide_segment((1.0, 0.0, 0.0))

    assert node is b
    assert vessel.get_number_of_segments() == 1
    assert len(network.nodes) == num_nodes


def test_divide_segment_off_vessel_rejected():
    network = VesselNetwork()
    vessel = network.add_vessel_from_nodes(_row(network, [0, 1]))

    with pytest.raises(StructuralError, match="not on a segment"):
        vessel.divide_segment((0.5, 1.0, 0.0))


def test_divide_segment_keeps_order():
    network = VesselNetwork()
    a, b, c = _row(network, [0, 1, 2])
    ba = network.add_segment(b, a)
    bc = network.add_segment(b, c)
    vessel = network.add_vessel([ba, bc])

    vessel.divide_segment((0.5, 0.0, 0.0))
    vessel.divide_segment((1.5, 0.0, 0.0))

    xs = [node.position.x for node in vessel.get_nodes()]
    assert xs == pytest.approx([0.0, 0.5, 1.0, 1.5, 2.0])
    assert vessel.get_start_node() is a
    assert vessel.get_end_node() is c


def test_remove_segments_from_either_end():
    network = VesselNetwork()
    a, b, c, d = _row(network, [0, 1, 2, 3])
    vessel = network.add_vessel_from_nodes([a, b, c, d])
    first_id, last_id = vessel.segment_ids[0], vessel.segment_ids[-1]

    vessel.remove_segments(SegmentLocation.START)
    vessel.remove_segments(SegmentLocation.END)

    assert vessel.get_nodes() == [b, c]
    assert first_id not in network.segments
    assert last_id not in network.segments
    assert a.segment_ids == []


def test_remove_last_segment_rejected():
    network = VesselNetwork()
    vessel = network.add_vessel_from_nodes(_row(network, [0, 1]))

    with pytest.raises(StructuralError, match="at least one segment"):
        vessel.remove_segments(SegmentLocation.END)


def test_remove_segments_bad_location():
    network = VesselNetwork()
    vessel = network.add_vessel_from_nodes(_row(network, [0, 1, 2]))

    with pytest.raises(StructuralError, match="start or end"):
        vessel.remove_segments("middle")


def test_flow_properties_follow_segments():
    network = VesselNetwork()
    a, b, c = _row(network, [0, 1, 2])
    vessel = network.add_vessel_from_nodes([a, b])
    vessel.flow_properties.flow_rate = 2.0

    extra = network.add_segment(b, c)
    vessel.add_segment(extra)
    assert vessel.flow_properties.flow_rate == pytest.approx(1.0)

    vessel.flow_properties.haematocrit = 0.4
    assert extra.flow_properties.haematocrit == pytest.approx(0.4)


def test_connected_vessels_at_both_ends(linear_chain):
    network, vessels = linear_chain
    first, middle, last = vessels

    connected = middle.get_connected_vessels()

    assert connected == [first, last]
    assert first.get_connected_vessels() == [middle]
    assert middle.is_connected_to(last)
    assert not first.is_connected_to(last)


def test_node_at_opposite_end(linear_chain):
    network, vessels = linear_chain
    vessel = vessels[0]

    assert vessel.get_node_at_opposite_end(vessel.get_start_node()) is vessel.get_end_node()
    with pytest.raises(StructuralError):
        vessel.get_node_at_opposite_end(vessels[2].get_end_node())


def test_vessel_distance_queries(linear_chain):
    network, vessels = linear_chain
    vessel = vessels[1]

    assert vessel.get_distance((1.5, 2.0, 0.0)) == pytest.approx(2.0)
    assert vessel.get_closest_end_node_distance((0.0, 0.0, 0.0)) == pytest.approx(1.0)


def test_output_data(linear_chain):
    network, vessels = linear_chain

    data = vessels[0].get_output_data()

    assert data["Vessel Id"] == vessels[0].id
    assert data["Vessel Length"] == pytest.approx(1.0)
    assert data["Vessel Flow Rate"] == pytest.approx(1.0)
