"""ECDSA signature verification over a curve whose base and scalar fields are foreign to the circuit."""

import logging
import secrets

from zkforeign.circuit.circuit import ConstraintUnsatisfiedError
from zkforeign.elliptic_curves.curve_parameters import AffinePoint, CurveParameters, initial_aggregator
from zkforeign.elliptic_curves.ec_operations_foreign import EllipticCurveForeign
from zkforeign.elliptic_curves.ec_operations_foreign_msm import EllipticCurveForeignMsm
from zkforeign.fields.foreign_field import Field3, ForeignField
from zkforeign.types.provable_types import EcdsaSignature, Point, TableConfig

logger = logging.getLogger(__name__)


class Ecdsa:
    """ECDSA over a curve with `a = 0`, as constraints or as plain integer arithmetic.

    Attributes:
        curve (CurveParameters): The curve.
        msm (EllipticCurveForeignMsm): The multi-scalar multiplication gadgets used for verification.
    """

    def __init__(self, curve: CurveParameters, ia: tuple[int, int] | None = None):
        """Initialise ECDSA over `curve`.

        Args:
            curve (CurveParameters): The curve.
            ia (tuple[int, int] | None): The initial aggregator of the multi-scalar multiplication. Defaults to
                `None`, in which case it is derived from the curve parameters.
        """
        self.curve = curve
        self.msm = EllipticCurveForeignMsm(
            curve, EllipticCurveForeign(curve), ia if ia is not None else initial_aggregator(curve)
        )

    def public_key(self, private_key: int) -> tuple[int, int]:
        """Return `private_key * G`."""
        return self.curve.scale(self.curve.generator, private_key)

    def sign(self, msg_hash: int, private_key: int, nonce: int | None = None) -> tuple[int, int]:
        """Sign the message hash `msg_hash` with `private_key`.

        The signature is `(r, s)` with `r = (k * G).x mod n` and `s = k^-1 * (msg_hash + r * private_key) mod n`.
        The nonce `k` is drawn at random unless given. The signature is not normalised to a low `s`.

        Args:
            msg_hash (int): The message hash, as an integer.
            private_key (int): The private key, in `[1, n)`.
            nonce (int | None): The nonce `k`. Defaults to `None`, in which case a random nonce is used.

        Returns:
            The signature `(r, s)`.

        Raises:
            ValueError: If the private key or the nonce is out of range, or the nonce yields a degenerate signature.
        """
        n = self.curve.order
        if not 0 < private_key < n:
            msg = "The private key must be in [1, n)"
            raise ValueError(msg)
        while True:
            k = nonce if nonce is not None else secrets.randbelow(n - 1) + 1
            if not 0 < k < n:
                msg = "The nonce must be in [1, n)"
                raise ValueError(msg)
            r = self.curve.scale(self.curve.generator, k)[0] % n
            s = pow(k, -1, n) * (msg_hash + r * private_key) % n
            if r != 0 and s != 0:
                return r, s
            if nonce is not None:
                msg = "The nonce yields a degenerate signature"
                raise ValueError(msg)

    def verify_constant(self, signature: tuple[int, int], msg_hash: int, public_key: AffinePoint) -> bool:
        """Verify an ECDSA signature with plain integer arithmetic.

        The public key must be on the curve (and in the subgroup, if the curve has a cofactor), `r` and `s` must be
        in `[1, n)`, and the x coordinate of `u1 * G + u2 * public_key` must equal `r` modulo `n`, where
        `u1 = msg_hash / s` and `u2 = r / s`.

        Args:
            signature (tuple[int, int]): The signature `(r, s)`.
            msg_hash (int): The message hash.
            public_key (AffinePoint): The public key.

        Returns:
            `True` if the signature is valid.
        """
        curve = self.curve
        n = curve.order
        r, s = signature
        if public_key is None or not curve.is_on_curve(public_key):
            return False
        if curve.has_cofactor and not curve.is_in_subgroup(public_key):
            return False
        if not (1 <= r < n and 1 <= s < n):
            return False

        try:
            s_inv = pow(s, -1, n)
        except ValueError as e:
            msg = "Inverse of s must exist in a prime-order group"
            raise RuntimeError(msg) from e
        u1 = msg_hash * s_inv % n
        u2 = r * s_inv % n

        X = curve.add(curve.scale(curve.generator, u1), curve.scale(public_key, u2))  # noqa: N806
        if X is None:
            return False
        return X[0] % n == r

    def verify(
        self,
        signature: EcdsaSignature,
        msg_hash: Field3,
        public_key: Point,
        tables: tuple[TableConfig | None, TableConfig | None] | None = None,
    ) -> None:
        """Assert that `signature` is a valid signature of `msg_hash` under `public_key`.

        If every input is a constant, the signature is checked with `verify_constant`. Otherwise, constraints are
        added that compute `R = u1 * G + u2 * public_key` with the GLV multi-scalar multiplication and assert that
        `R.x mod n = r`. The public key is not checked to be on the curve in that case.

        Args:
            signature (EcdsaSignature): The signature.
            msg_hash (Field3): The message hash, an element of the scalar field.
            public_key (Point): The public key.
            tables (tuple[TableConfig | None, TableConfig | None] | None): The table configurations of the
                generator and of the public key. Defaults to `None`, which means window size `1` for both.

        Raises:
            ConstraintUnsatisfiedError: If the signature is invalid.
        """
        n = self.curve.order
        if signature.is_constant() and msg_hash.is_constant() and public_key.is_constant():
            if not self.verify_constant(signature.to_bigint(), msg_hash.to_int(), public_key.to_bigint()):
                msg = "Invalid signature"
                raise ConstraintUnsatisfiedError(msg)
            return

        s_inv = ForeignField.inv(signature.s, n)
        u1 = ForeignField.mul(msg_hash, s_inv, n)
        u2 = ForeignField.mul(signature.r, s_inv, n)

        G = Point.from_bigint(self.curve.generator)  # noqa: N806
        R = self.msm.multi_scalar_mul_glv([u1, u2], [G, public_key], tables)  # noqa: N806

        # reduce R.x modulo n
        rx = ForeignField.mul(R.x, 1, n)
        rx.assert_equal(signature.r)

        circuit = rx.circuit
        if circuit is not None:
            logger.debug("ECDSA verification on %s: %s", self.curve.name, circuit.summary())
