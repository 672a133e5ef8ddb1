"""Program generation, listing and schedule routes."""

from fastapi import APIRouter, Request

from ..responses import get_services, ok
from ..schemas import GenerateProgramIn, ProgramUpdateIn

router = APIRouter(tags=["programs"])


@router.post("/ai-workout-generator")
async def generate_program(request: Request, body: GenerateProgramIn):
    """Generate and schedule a new program."""
    params = body.model_dump(exclude={"user_key"})
    result = await get_services(request).generator.generate(body.user_key, params)
    return ok(result.to_dict(), status_code=201)


@router.get("/workout-programs")
async def list_programs(request: Request, user_key: str):
    """Active programs with their current week and upcoming sessions."""
    return ok(await get_services(request).programs.list_programs(user_key))


@router.put("/workout-programs")
async def update_program(request: Request, body: ProgramUpdateIn):
    """Rename a program or change its status."""
    program = await get_services(request).programs.update_program(
        body.user_key, body.program_id, name=body.program_name, status=body.status
    )
    return ok(program.to_dict())


@router.delete("/workout-programs")
async def delete_program(request: Request, user_key: str, program_id: int):
    """Soft delete a program."""
    program = await get_services(request).programs.delete_program(user_key, program_id)
    return ok(
        {"id": program.id, "program_name": program.name},
        message="Program deleted successfully",
    )


@router.get("/workout-schedule")
async def get_schedule(request: Request, user_key: str, program_id: int):
    """All sessions of a program grouped by week, with statistics."""
    return ok(await get_services(request).programs.get_schedule(user_key, program_id))
