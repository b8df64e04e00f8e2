# problemlog/services/settings_service.py
"""
Branding and login-page settings stored as key/value rows.
Stored values are merged over the defaults, so new keys always have a value.
"""
import json
import logging
import os
import uuid
from typing import Any, Dict, Optional

import aiofiles
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from sqlmodel import select

from ..core.constants import SETTINGS_TARGET, ActivityAction
from ..models.setting import Setting
from ..models.user import User
from .activity_service import log_activity

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "app_name": "Problem Log System",
    "tagline": "MANAGEMENT SYSTEM",
    "company_name": "Problem Log Inc.",
    "logo_url": None,
    "login_headline": "Kelola Insiden &\nMasalah dengan Efisien.",
    "login_description": (
        "Dashboard terpusat untuk memonitor, melacak, dan menyelesaikan masalah "
        "teknis operasional perusahaan Anda."
    ),
    "login_background_image_url": (
        "https://images.unsplash.com/photo-1551288049-bebda4e38f71?q=80&w=2070&auto=format&fit=crop"
    ),
    "login_features": [
        {"title": "Real-time Logging", "desc": "Pencatatan masalah secara langsung dan akurat."},
        {"title": "Secure Access", "desc": "Keamanan data terjamin dengan enkripsi standar industri."},
    ],
}

BRANDING_IMAGE_KEYS = ("logo_url", "login_background_image_url")


class SettingsService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all_settings(self) -> Dict[str, Any]:
        result = await self.session.exec(select(Setting))
        stored = {}
        for s in result.all():
            try:
                stored[s.key] = json.loads(s.value)
            except ValueError:
                logger.warning("Ignoring unreadable setting %s", s.key)
        merged = {**DEFAULT_SETTINGS, **{k: v for k, v in stored.items() if k in DEFAULT_SETTINGS}}
        # Lists are replaced, never merged
        merged["login_features"] = stored.get("login_features") or DEFAULT_SETTINGS["login_features"]
        return merged

    async def update_settings(self, settings_to_update: Dict[str, Any], actor: Optional[User] = None) -> Dict[str, Any]:
        for key, value in settings_to_update.items():
            if key not in DEFAULT_SETTINGS:
                raise ValueError(f"Pengaturan tidak dikenal: {key}")
            encoded = json.dumps(value)
            setting = await self.session.get(Setting, key)
            if setting:
                setting.value = encoded
            else:
                setting = Setting(key=key, value=encoded)
            self.session.add(setting)

        await self.session.commit()
        await log_activity(
            self.session, actor, ActivityAction.UPDATE, SETTINGS_TARGET, "Updated application configuration"
        )
        return await self.get_all_settings()

    async def reset_settings(self, actor: Optional[User] = None) -> Dict[str, Any]:
        await self.session.execute(delete(Setting))
        await self.session.commit()
        await log_activity(self.session, actor, ActivityAction.DELETE, SETTINGS_TARGET, "Reset settings to default")
        return dict(DEFAULT_SETTINGS)

    async def upload_branding_image(
        self, key: str, file: UploadFile, upload_dir: str, actor: Optional[User] = None
    ) -> Dict[str, Any]:
        """Stores an image under {upload_dir}/branding and points `key` at it."""
        if key not in BRANDING_IMAGE_KEYS:
            raise ValueError(f"Pengaturan gambar tidak dikenal: {key}")
        if not (file.content_type or "").startswith("image/"):
            raise ValueError("File harus berupa gambar.")

        file_extension = os.path.splitext(file.filename or "")[1]
        saved_filename = f"{uuid.uuid4()}{file_extension}"
        save_dir = os.path.join(upload_dir, "branding")
        os.makedirs(save_dir, exist_ok=True)

        async with aiofiles.open(os.path.join(save_dir, saved_filename), "wb") as out_file:
            await out_file.write(await file.read())

        return await self.update_settings({key: f"/uploads/branding/{saved_filename}"}, actor)
