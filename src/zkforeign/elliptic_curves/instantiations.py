"""Curves available out of the box."""

from zkforeign.elliptic_curves.curve_parameters import create_curve

secp256k1 = create_curve(
    name="secp256k1",
    modulus=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F,
    order=0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141,
    b=7,
    generator=(
        0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
        0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
    ),
    endomorphism=(
        0x7AE96A2B657C07106E64479EAC3434E99CF0497512F58995C1396C28719501EE,
        0x5363AD4CC05C30E0A5261C028812645A122E22EA20816678DF02967C1B23BD72,
    ),
)

# The Vesta curve is defined over the scalar field of Pallas, its order is the native modulus.
vesta = create_curve(
    name="vesta",
    modulus=0x40000000000000000000000000000000224698FC0994A8DD8C46EB2100000001,
    order=0x40000000000000000000000000000000224698FC094CF91B992D30ED00000001,
    b=5,
    generator=(0x40000000000000000000000000000000224698FC0994A8DD8C46EB2100000000, 2),
)
