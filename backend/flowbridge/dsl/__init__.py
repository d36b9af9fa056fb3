from flowbridge.dsl.detector import DialectDetectionResult, DialectDetector, detect, detect_dialect
from flowbridge.dsl.sidecar import Sidecar, decode_sidecar, encode_sidecar, is_sidecar_line
