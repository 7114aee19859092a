"""QR payload and image generation service."""
import base64
import io
import json
from datetime import datetime

import qrcode
from flask import current_app

from qrattend.utils.errors import ValidationError
from qrattend.utils.helpers import isoformat, utcnow

PAYLOAD_TYPE = 'attendance'

class QRService:
    """Service for QR code operations."""
    
    @staticmethod
    def build_payload(session_id: str, now: datetime = None) -> str:
        """JSON text embedded in the QR code shown to students."""
        qr_data = {
            'sessionId': session_id,
            'timestamp': isoformat(now or utcnow()),
            'type': PAYLOAD_TYPE
        }
        return json.dumps(qr_data, separators=(',', ':'))
    
    @staticmethod
    def parse_payload(qr_data_string: str) -> str:
        """Extract the session id from scanned QR text.
        
        Only the payload shape is checked here; whether the session can be
        joined is decided by the validity service.
        """
        try:
            qr_data = json.loads(qr_data_string)
        except (TypeError, ValueError):
            raise ValidationError("Invalid QR code format")
        
        if not isinstance(qr_data, dict):
            raise ValidationError("Invalid QR code format")
        
        if qr_data.get('type') != PAYLOAD_TYPE:
            raise ValidationError("QR code is not an attendance code")
        
        for field in ('sessionId', 'timestamp'):
            value = qr_data.get(field)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Missing field: {field}")
        
        return qr_data['sessionId'].strip()
    
    @staticmethod
    def generate_qr_image(data: str) -> str:
        """Render ``data`` as a PNG data URI."""
        config = current_app.config
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=config.get('QR_BOX_SIZE', 10),
            border=config.get('QR_BORDER', 2),
        )
        qr.add_data(data)
        qr.make(fit=True)
        
        img = qr.make_image(
            fill_color=config.get('QR_FILL_COLOR', 'black'),
            back_color=config.get('QR_BACK_COLOR', 'white')
        )
        
        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()
        
        return f"data:image/png;base64,{img_str}"
