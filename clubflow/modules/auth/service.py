import hashlib
import logging
import time
from supabase import Client, create_client
from clubflow.modules.auth.schemas import ClubAccess, LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from clubflow.config import settings
from clubflow.core.timeutils import utcnow
from fastapi import HTTPException
from typing import Dict, Any, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TokenUserCache:
    """Bounded token -> user map; a page load fires several club requests with one token"""

    def __init__(self, ttl: float = 60, max_size: int = 500):
        self.ttl = ttl
        self.max_size = max_size
        self._entries: Dict[str, Tuple[Dict[str, Any], float]] = {}

    @staticmethod
    def _key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        key = self._key(token)
        entry = self._entries.get(key)
        if entry is None:
            return None
        user, expiry = entry
        if time.monotonic() >= expiry:
            del self._entries[key]
            return None
        return user

    def purge_expired(self) -> int:
        now = time.monotonic()
        expired = [key for key, (_, expiry) in self._entries.items() if now >= expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def put(self, token: str, user: Dict[str, Any]) -> None:
        if len(self._entries) >= self.max_size:
            self.purge_expired()
        if len(self._entries) >= self.max_size:
            return
        self._entries[self._key(token)] = (user, time.monotonic() + self.ttl)

    def drop(self, token: str) -> None:
        self._entries.pop(self._key(token), None)

    def clear(self) -> None:
        self._entries.clear()


token_cache = TokenUserCache()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up with Supabase Auth and create the user_profiles row clubs look members up by"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": register_data.model_dump(
                        include={"first_name", "last_name"}, exclude_none=True
                    )
                }
            })
            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Registration was not accepted")

            user_id = auth_response.user.id
            email = (auth_response.user.email or register_data.email).lower()
            self.supabase.table("user_profiles").insert({
                "id": user_id,
                "email": email,
                "first_name": register_data.first_name,
                "last_name": register_data.last_name,
                "preferred_language": register_data.preferred_language,
                "is_active": True,
                "is_super_admin": False,
            }).execute()
            logger.info(f"Registered user {user_id}")

            return RegisterResponse(
                user_id=user_id,
                email=email,
                requires_confirmation=auth_response.session is None,
            )
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "already registered" in message or "already exists" in message:
                raise HTTPException(status_code=409, detail="An account with this email already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Password sign-in; the response lists the clubs the user is an active member of"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")

            user_id = auth_response.user.id
            self.supabase.table("user_profiles")\
                .update({"last_login_at": utcnow().isoformat()})\
                .eq("id", user_id)\
                .execute()

            session = auth_response.session
            return TokenResponse(
                access_token=session.access_token,
                refresh_token=getattr(session, "refresh_token", None),
                expires_at=getattr(session, "expires_at", None),
                user_id=user_id,
                email=auth_response.user.email or login_data.email,
                clubs=self.list_club_access(user_id),
            )
        except HTTPException:
            raise
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")

    def list_club_access(self, user_id: str) -> List[ClubAccess]:
        """Active memberships of a user, joined with club names and role names"""
        memberships = self.supabase.table("club_memberships")\
            .select("club_id, role_id")\
            .eq("user_id", user_id)\
            .eq("status", "active")\
            .execute().data or []
        if not memberships:
            return []

        club_ids = [m["club_id"] for m in memberships]
        role_ids = [m["role_id"] for m in memberships if m.get("role_id") is not None]
        clubs = self.supabase.table("clubs").select("id, name").in_("id", club_ids).execute().data or []
        roles = []
        if role_ids:
            roles = self.supabase.table("roles").select("id, name").in_("id", role_ids).execute().data or []
        club_names = {c["id"]: c["name"] for c in clubs}
        role_names = {r["id"]: r["name"] for r in roles}

        return [
            ClubAccess(
                club_id=m["club_id"],
                club_name=club_names.get(m["club_id"]),
                role=role_names.get(m.get("role_id")),
            )
            for m in memberships
        ]

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve the bearer token to the Supabase user; answers from token_cache while fresh"""
        cached = token_cache.get(token)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug(f"Token validation failed: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "app_metadata": user.app_metadata or {},
        }
        token_cache.put(token, user_data)
        return user_data

    def logout(self, token: str) -> bool:
        token_cache.drop(token)
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False

    def set_super_user(self, user_id: str, is_super_user: bool = True) -> bool:
        """Flip app_metadata.type for a user; needs the service role key"""
        if not settings.supabase_service_role_key:
            raise HTTPException(status_code=500, detail="Service role key is not configured")
        try:
            admin_client = create_client(settings.supabase_url, settings.supabase_service_role_key)
            response = admin_client.auth.admin.update_user_by_id(
                user_id,
                {"app_metadata": {"type": "super_user"} if is_super_user else {}}
            )
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")

            self.supabase.table("user_profiles")\
                .update({"is_super_admin": is_super_user})\
                .eq("id", user_id)\
                .execute()
            token_cache.clear()
            logger.info(f"Super user status of {user_id} set to {is_super_user}")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update super user status: {str(e)}")
