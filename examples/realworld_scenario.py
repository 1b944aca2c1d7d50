"""End-to-end scenario demonstrating the Python client API.

Creates an ubuntu container, runs ``echo test`` through an exec session,
tails the container logs and cleans up. Point ``DOCKER_HOST`` at a daemon
(defaults to the local Unix socket).
"""

from __future__ import annotations

import asyncio
import os

from docker_modem import DockerClient, DockerModemError, NotFoundError

IMAGE = os.getenv("DOCKER_MODEM_DEMO_IMAGE", "ubuntu:22.04")
CONTAINER_NAME = os.getenv("DOCKER_MODEM_DEMO_NAME", "docker-modem-demo")


def log_section(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


async def ensure_image(docker: DockerClient) -> None:
    try:
        await docker.image.inspect(resource_id=IMAGE)
        print(f"Image {IMAGE} already present")
    except NotFoundError:
        repository, _, tag = IMAGE.partition(":")
        progress = await docker.image.create({"fromImage": repository, "tag": tag or "latest", "stream": True})
        async for message in progress.iter_json():
            status = message.get("status")
            if status:
                print(f"  {status} {message.get('progress', '')}".rstrip())
        await progress.aclose()


async def run() -> None:
    async with DockerClient() as docker:
        log_section("Daemon")
        print(f"Ping: {await docker.ping()}")
        version = await docker.version()
        print(f"Engine {version.get('Version')} (API {version.get('ApiVersion')})")

        log_section("Image")
        await ensure_image(docker)

        log_section("Container")
        container = await docker.container.create(
            {
                "name": CONTAINER_NAME,
                "Image": IMAGE,
                "Cmd": ["/bin/bash", "-c", "tail -f /var/log/bootstrap.log || sleep infinity"],
            }
        )
        print(f"Created {container}")
        await container.start()
        print("Started")

        try:
            log_section("Exec `echo test`")
            instance = await container.exec.create(
                {"AttachStdout": True, "AttachStderr": True, "Cmd": ["echo", "test"]}
            )
            async with await instance.start({"Detach": False}) as stream:
                stdout, stderr = await stream.demux_all()
            print(f"stdout: {stdout.decode().strip()!r}")
            if stderr:
                print(f"stderr: {stderr.decode().strip()!r}")
            details = await instance.inspect()
            print(f"Exit code: {details.get('ExitCode')}")

            log_section("Logs")
            print(await container.logs({"stdout": True, "stderr": True, "tail": 5}))

            log_section("Stats")
            stats = await container.stats()
            print(f"Memory usage: {stats.get('memory_stats', {}).get('usage')}")
        finally:
            log_section("Cleanup")
            await container.kill()
            print("Killed")
            await container.delete({"force": True})
            print("Removed")


def main() -> None:
    try:
        asyncio.run(run())
    except DockerModemError as exc:
        print(f"Scenario failed: {exc!r}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
