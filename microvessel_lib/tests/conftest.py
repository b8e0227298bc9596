import pytest
from microvessel_lib.core.network import VesselNetwork


@pytest.fixture
def linear_chain():
    """Three vessels in a row, fed from an input node, unit flow throughout."""
    network = VesselNetwork()
    n0 = network.add_node((0.0, 0.0, 0.0), is_input=True)
    n1 = network.add_node((1.0, 0.0, 0.0))
    n2 = network.add_node((2.0, 0.0, 0.0))
    n3 = network.add_node((3.0, 0.0, 0.0), is_output=True)

    vessels = [
        network.add_vessel_from_nodes([n0, n1], radius=1.0),
        network.add_vessel_from_nodes([n1, n2], radius=1.0),
        network.add_vessel_from_nodes([n2, n3], radius=1.0),
    ]
    for vessel in vessels:
        vessel.flow_properties.flow_rate = 1.0

    return network, vessels


@pytest.fixture
def y_bifurcation():
    """
    One input-fed parent splitting into two equal daughters.

    Parent flow is 2, each daughter carries 1.
    """
    network = VesselNetwork()
    inlet = network.add_node((0.0, 0.0, 0.0), is_input=True)
    junction = network.add_node((1.0, 0.0, 0.0))
    out_a = network.add_node((2.0, 1.0, 0.0), is_output=True)
    out_b = network.add_node((2.0, -1.0, 0.0), is_output=True)

    parent = network.add_vessel_from_nodes([inlet, junction], radius=1.0)
    daughter_a = network.add_vessel_from_nodes([junction, out_a], radius=1.0)
    daughter_b = network.add_vessel_from_nodes([junction, out_b], radius=1.0)

    parent.flow_properties.flow_rate = 2.0
    daughter_a.flow_properties.flow_rate = 1.0
    daughter_b.flow_properties.flow_rate = 1.0

    return network, parent, daughter_a, daughter_b
