"""
InsightFace-backed FaceEmbedder.
Decodes the image with OpenCV and runs FaceAnalysis on CPU.

Requires the `insightface` extra (insightface, onnxruntime, opencv).
Model packs are downloaded by InsightFace into ~/.insightface/models on
first load; a missing or broken pack leaves the embedder FAILED.
"""

from typing import List

import numpy as np

from face_attendance.core.exceptions import ValidationError
from face_attendance.core.logging import get_logger
from face_attendance.models.domain.recognition import BoundingBox, Detection
from face_attendance.services.face_embedder import FaceEmbedder

logger = get_logger(__name__)


def decode_image(image_bytes: bytes) -> np.ndarray:
    """
    Decode image from bytes to numpy array (BGR).

    Raises:
        ValidationError: If image cannot be decoded
    """
    import cv2

    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if image is None:
        raise ValidationError("Failed to decode image", field="image")

    return image


class InsightFaceEmbedder(FaceEmbedder):
    """Face detection + ArcFace embeddings from an InsightFace model pack."""

    name = "insightface"

    def __init__(self, model_name: str = "buffalo_l", det_size: int = 640, min_det_score: float = 0.5):
        super().__init__()
        self.model_name = model_name
        self.det_size = det_size
        self.min_det_score = min_det_score
        self.app = None

    def _load(self):
        from insightface.app import FaceAnalysis

        app = FaceAnalysis(
            name=self.model_name,
            allowed_modules=["detection", "recognition"],
            providers=["CPUExecutionProvider"],
        )
        app.prepare(ctx_id=-1, det_size=(self.det_size, self.det_size))

        models_list = list(getattr(app, "models", {}).keys())
        logger.info(f"InsightFace models loaded: {models_list}")
        if "detection" not in models_list or "recognition" not in models_list:
            raise RuntimeError(f"Model pack '{self.model_name}' is missing detection or recognition")
        self.app = app

    def _detect(self, image: bytes) -> List[Detection]:
        img_array = decode_image(image)
        faces = self.app.get(img_array)

        detections = []
        for face in faces:
            if float(face.det_score) < self.min_det_score:
                continue
            x1, y1, x2, y2 = [float(v) for v in face.bbox]
            detections.append(Detection(
                bounding_box=BoundingBox.from_xyxy(x1, y1, x2, y2),
                embedding=tuple(float(v) for v in face.normed_embedding),
            ))
        return detections
