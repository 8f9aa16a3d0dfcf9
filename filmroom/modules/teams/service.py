from supabase import Client
from filmroom.config.permissions_config import INVITABLE_ROLES, ROLE_HIERARCHY, has_min_role, min_role_for
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.modules.games.service import GameService
from filmroom.modules.teams.schemas import (
    MemberInvite, MemberResponse, TeamCreate, TeamDeleteResponse, TeamResponse, TeamUpdate
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, supabase: Client, entitlements: Optional[EntitlementsService] = None):
        self.supabase = supabase
        self.entitlements = entitlements or EntitlementsService(supabase)

    def _get_team_row(self, team_id: str) -> dict:
        result = self.supabase.table("teams")\
            .select("*")\
            .eq("id", team_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Team not found")
        return result.data[0]

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------

    def create_team(self, team_data: TeamCreate, user_id: str) -> TeamResponse:
        """Create a team owned by user_id, with its owner membership and a basic subscription."""
        if not team_data.name.strip():
            raise HTTPException(status_code=400, detail="Team name is required")
        try:
            now = datetime.utcnow().isoformat()
            result = self.supabase.table("teams").insert({
                "name": team_data.name.strip(),
                "level": team_data.level,
                "organization_id": team_data.organization_id,
                "colors": team_data.colors,
                "user_id": user_id,
                "created_at": now,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team")
            team = result.data[0]

            self.supabase.table("team_memberships").insert({
                "team_id": team["id"],
                "user_id": user_id,
                "role": "owner",
                "invited_by": user_id,
                "invited_at": now,
                "joined_at": now,
                "is_active": True,
            }).execute()
            self.entitlements.create_subscription(team["id"], user_id)
            logger.info(f"Created team {team['id']} for user {user_id}")
            return TeamResponse(**team, role="owner")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_team(self, team_id: str) -> TeamResponse:
        return TeamResponse(**self._get_team_row(team_id))

    def list_teams_for_user(self, user_id: str) -> List[TeamResponse]:
        """Teams the user owns or is an active member of, with the user's role."""
        try:
            roles = {}
            owned = self.supabase.table("teams")\
                .select("id")\
                .eq("user_id", user_id)\
                .execute()
            for team in owned.data or []:
                roles[team["id"]] = "owner"
            memberships = self.supabase.table("team_memberships")\
                .select("team_id, role")\
                .eq("user_id", user_id)\
                .eq("is_active", True)\
                .execute()
            for m in memberships.data or []:
                roles.setdefault(m["team_id"], m["role"])
            if not roles:
                return []
            result = self.supabase.table("teams")\
                .select("*")\
                .in_("id", list(roles.keys()))\
                .order("name")\
                .execute()
            return [TeamResponse(**{**t, "role": roles.get(t["id"])}) for t in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_team(self, team_id: str, team_data: TeamUpdate) -> TeamResponse:
        self._get_team_row(team_id)
        update_data = team_data.model_dump(exclude_unset=True)
        if "name" in update_data and not (update_data["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Team name cannot be empty")
        if not update_data:
            return self.get_team(team_id)
        update_data["updated_at"] = datetime.utcnow().isoformat()
        try:
            result = self.supabase.table("teams")\
                .update(update_data)\
                .eq("id", team_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Team not found")
            return TeamResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_team(self, team_id: str, user_id: str) -> TeamDeleteResponse:
        """Delete a team: every game via the game deletion flow, then roster, members and billing rows."""
        self._get_team_row(team_id)
        try:
            game_service = GameService(self.supabase, entitlements=self.entitlements)
            games = self.supabase.table("games")\
                .select("id")\
                .eq("team_id", team_id)\
                .execute()
            for game in games.data or []:
                game_service.delete_game(team_id, game["id"], user_id)

            players = self.supabase.table("players")\
                .delete()\
                .eq("team_id", team_id)\
                .execute()
            for table in ("team_memberships", "token_transactions", "token_balance", "subscriptions"):
                self.supabase.table(table)\
                    .delete()\
                    .eq("team_id", team_id)\
                    .execute()
            self.supabase.table("teams")\
                .delete()\
                .eq("id", team_id)\
                .execute()
            logger.info(f"Deleted team {team_id} with {len(games.data or [])} game(s)")
            return TeamDeleteResponse(
                team_id=team_id,
                deleted_games=len(games.data or []),
                deleted_players=len(players.data or []),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete team {team_id}: {str(e)}")
            raise HTTPException(status_code=500, detail=str(e))

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def list_members(self, team_id: str) -> List[MemberResponse]:
        try:
            result = self.supabase.table("team_memberships")\
                .select("*")\
                .eq("team_id", team_id)\
                .eq("is_active", True)\
                .execute()
            members = result.data or []
            profiles = {}
            if members:
                profile_rows = self.supabase.table("profiles")\
                    .select("id, email, full_name")\
                    .in_("id", [m["user_id"] for m in members])\
                    .execute()
                profiles = {p["id"]: p for p in profile_rows.data or []}
            response = []
            for m in members:
                profile = profiles.get(m["user_id"], {})
                response.append(MemberResponse(**m, email=profile.get("email"), full_name=profile.get("full_name")))
            response.sort(key=lambda m: -ROLE_HIERARCHY.get(m.role, 0))
            return response
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_membership(self, team_id: str, user_id: str) -> Optional[dict]:
        result = self.supabase.table("team_memberships")\
            .select("*")\
            .eq("team_id", team_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def invite_member(self, team_id: str, invite: MemberInvite, acting_user: dict) -> MemberResponse:
        """Add an existing user to the team by email, or reactivate a removed member."""
        if not has_min_role(acting_user.get("team_role"), min_role_for("members:invite")):
            raise HTTPException(status_code=403, detail="Only owners and coaches can invite members")
        if invite.role not in INVITABLE_ROLES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid role: {invite.role}. Allowed: {', '.join(INVITABLE_ROLES)}"
            )
        team = self._get_team_row(team_id)

        profile = self.supabase.table("profiles")\
            .select("id, email, full_name")\
            .eq("email", invite.email.lower())\
            .limit(1)\
            .execute()
        if not profile.data:
            raise HTTPException(status_code=404, detail="No user found with that email. They must sign up first.")
        invitee = profile.data[0]
        if invitee["id"] == team.get("user_id"):
            raise HTTPException(status_code=409, detail="User is already a member of this team")

        now = datetime.utcnow().isoformat()
        existing = self._get_membership(team_id, invitee["id"])
        try:
            if existing and existing.get("is_active"):
                raise HTTPException(status_code=409, detail="User is already a member of this team")
            if existing:
                result = self.supabase.table("team_memberships")\
                    .update({
                        "role": invite.role,
                        "is_active": True,
                        "invited_by": acting_user["id"],
                        "invited_at": now,
                        "joined_at": now,
                    })\
                    .eq("id", existing["id"])\
                    .execute()
                logger.info(f"Reactivated {invitee['id']} on team {team_id} as {invite.role}")
            else:
                result = self.supabase.table("team_memberships").insert({
                    "team_id": team_id,
                    "user_id": invitee["id"],
                    "role": invite.role,
                    "invited_by": acting_user["id"],
                    "invited_at": now,
                    "joined_at": now,
                    "is_active": True,
                }).execute()
                logger.info(f"Added {invitee['id']} to team {team_id} as {invite.role}")
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add member")
            return MemberResponse(**result.data[0], email=invitee.get("email"), full_name=invitee.get("full_name"))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_member(self, team_id: str, user_id: str, acting_user: dict) -> bool:
        """Soft-delete a membership. Owners only; nobody removes themselves."""
        if not has_min_role(acting_user.get("team_role"), min_role_for("members:manage")):
            raise HTTPException(status_code=403, detail="Only owners can remove team members")
        if user_id == acting_user["id"]:
            raise HTTPException(status_code=400, detail="Cannot remove yourself from the team")
        team = self._get_team_row(team_id)
        if user_id == team.get("user_id"):
            raise HTTPException(status_code=400, detail="Cannot remove the team owner")
        membership = self._get_membership(team_id, user_id)
        if not membership or not membership.get("is_active"):
            raise HTTPException(status_code=404, detail="Member not found")
        self.supabase.table("team_memberships")\
            .update({"is_active": False})\
            .eq("id", membership["id"])\
            .execute()
        logger.info(f"Removed {user_id} from team {team_id}")
        return True

    def change_role(self, team_id: str, user_id: str, role: str, acting_user: dict) -> MemberResponse:
        if not has_min_role(acting_user.get("team_role"), min_role_for("members:manage")):
            raise HTTPException(status_code=403, detail="Only owners can change roles")
        if user_id == acting_user["id"]:
            raise HTTPException(status_code=400, detail="Cannot change your own role")
        if role not in ROLE_HIERARCHY:
            raise HTTPException(status_code=400, detail=f"Invalid role: {role}")
        membership = self._get_membership(team_id, user_id)
        if not membership or not membership.get("is_active"):
            raise HTTPException(status_code=404, detail="Member not found")
        result = self.supabase.table("team_memberships")\
            .update({"role": role})\
            .eq("id", membership["id"])\
            .execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to update role")
        logger.info(f"Changed role of {user_id} on team {team_id} to {role}")
        return MemberResponse(**result.data[0])
