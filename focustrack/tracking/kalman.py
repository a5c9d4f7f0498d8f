"""
Linear Kalman Filter for Subject Tracking

Implements a Constant Velocity (CV) motion model for frame-synchronous
tracking of detected subjects. One filter instance is owned by exactly one
track and advances exactly one frame per predict step.

State Vector: [x, y, vx, vy]^T
    - x, y: Position in image coordinates (pixels)
    - vx, vy: Velocity components (pixels/frame)

Reference:
    - Bar-Shalom, Y. "Estimation with Applications to Tracking and Navigation", 2001
    - Welch, G., Bishop, G. "An Introduction to the Kalman Filter", UNC TR 95-041
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Tuning constants (webcam-scale pixel noise)
INITIAL_UNCERTAINTY = 100.0
PROCESS_NOISE = 0.01
MEASUREMENT_NOISE = 0.1

# State transition matrix F for dt = 1 frame
#   | 1  0  1  0 |
#   | 0  1  0  1 |
#   | 0  0  1  0 |
#   | 0  0  0  1 |
TRANSITION_MATRIX = np.array(
    [[1, 0, 1, 0], [0, 1, 0, 1], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=np.float64
)
TRANSITION_MATRIX.flags.writeable = False

# Measurement matrix H: only position [x, y] is observed
OBSERVATION_MATRIX = np.array([[1, 0, 0, 0], [0, 1, 0, 0]], dtype=np.float64)
OBSERVATION_MATRIX.flags.writeable = False


@dataclass
class KalmanState:
    """
    State container for Kalman Filter.

    Attributes:
        x: State vector [x, y, vx, vy]
        P: State covariance matrix (4x4)
    """

    x: np.ndarray  # State vector
    P: np.ndarray  # Covariance matrix

    def copy(self) -> "KalmanState":
        return KalmanState(x=self.x.copy(), P=self.P.copy())


class LinearKalmanFilter:
    """
    Linear Kalman Filter for 2D subject tracking.

    Uses Constant Velocity (CV) motion model with one frame of elapsed time:
        x_{k+1} = x_k + vx
        y_{k+1} = y_k + vy
        vx_{k+1} = vx_k (constant)
        vy_{k+1} = vy_k (constant)

    Measurement model:
        z = [x, y] (subject center from the detector)

    The filter is seeded by a correction step against a degenerate prior:
    zero state and a high isotropic covariance, updated with the first
    measurement and no predict. Position lands just short of the measurement
    (gain P/(P+R)), position variance collapses to about R, and velocity
    variance stays at the initial scale.

    Example:
        >>> kf = LinearKalmanFilter((320.0, 240.0))
        >>> kf.predict()
        >>> kf.update((322.0, 241.0))
        >>> x, y = kf.position
    """

    def __init__(
        self,
        measurement: Tuple[float, float],
        initial_uncertainty: float = INITIAL_UNCERTAINTY,
        process_noise: float = PROCESS_NOISE,
        measurement_noise: float = MEASUREMENT_NOISE,
    ) -> None:
        """
        Initialize Kalman Filter at the first measurement.

        Args:
            measurement: First observed position (x, y)
            initial_uncertainty: Diagonal scale of the initial covariance
            process_noise: Diagonal scale of Q (acceleration slack)
            measurement_noise: Diagonal scale of R (detector jitter)
        """
        self.initial_uncertainty = initial_uncertainty
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise

        # Process noise covariance Q
        self.Q = np.eye(4) * process_noise

        # Measurement noise covariance R
        self.R = np.eye(2) * measurement_noise

        self._state: Optional[KalmanState] = KalmanState(
            x=np.zeros(4, dtype=np.float64),
            P=np.eye(4) * initial_uncertainty,
        )
        self.update(measurement)

    @property
    def _live_state(self) -> KalmanState:
        if self._state is None:
            raise RuntimeError("Kalman filter has been released")
        return self._state

    @property
    def is_released(self) -> bool:
        return self._state is None

    def predict(self) -> None:
        """
        Advance the state one frame without a measurement.

        Prediction equations:
            x_pred = F * x
            P_pred = F * P * F^T + Q
        """
        state = self._live_state
        F = TRANSITION_MATRIX

        state.x = F @ state.x
        state.P = F @ state.P @ F.T + self.Q

    def update(self, measurement: Tuple[float, float]) -> bool:
        """
        Correct the predicted state with a position measurement.

        Update equations:
            y = z - H * x          (innovation)
            S = H * P * H^T + R    (innovation covariance)
            K = P * H^T * S^-1     (Kalman gain)
            x_new = x + K * y
            P_new = (I - K * H) * P

        The covariance uses the Joseph form, which is algebraically equal to
        (I - K H) P for the optimal gain and keeps P symmetric PSD.

        Args:
            measurement: Position measurement (x, y)

        Returns:
            True if the correction was applied, False if it was skipped
            because the innovation covariance was degenerate.
        """
        state = self._live_state
        H = OBSERVATION_MATRIX
        z = np.asarray(measurement, dtype=np.float64)

        # Innovation (measurement residual)
        y = z - H @ state.x

        # Innovation covariance
        S = H @ state.P @ H.T + self.R

        try:
            S_inv = np.linalg.inv(S)
        except np.linalg.LinAlgError:
            logger.warning("Singular innovation covariance, keeping predicted state")
            return False

        # Kalman gain
        K = state.P @ H.T @ S_inv

        x_new = state.x + K @ y
        I_KH = np.eye(4) - K @ H
        P_new = I_KH @ state.P @ I_KH.T + K @ self.R @ K.T

        if not (np.all(np.isfinite(x_new)) and np.all(np.isfinite(P_new))):
            logger.warning("Non-finite Kalman update, keeping predicted state")
            return False

        state.x = x_new
        state.P = 0.5 * (P_new + P_new.T)
        return True

    @property
    def position(self) -> Tuple[float, float]:
        """Current estimated position (x, y)."""
        x = self._live_state.x
        return (float(x[0]), float(x[1]))

    @property
    def velocity(self) -> Tuple[float, float]:
        """Current estimated velocity (vx, vy) in pixels/frame."""
        x = self._live_state.x
        return (float(x[2]), float(x[3]))

    @property
    def speed(self) -> float:
        x = self._live_state.x
        return float(np.hypot(x[2], x[3]))

    @property
    def covariance(self) -> np.ndarray:
        """Copy of the 4x4 state covariance."""
        return self._live_state.P.copy()

    @property
    def state(self) -> KalmanState:
        """Snapshot of the filter state (copies, safe to mutate)."""
        return self._live_state.copy()

    def release(self) -> None:
        """Drop the state buffers. The filter is unusable afterwards."""
        self._state = None
