import logging
import os

from daemon_config import GameModeConfig

HERE = os.path.dirname(os.path.abspath(__file__))

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    config = GameModeConfig.create(search_dirs=["", HERE])
    config.register_post_reload_hook(lambda snap: print("Reloaded:", dict(snap)))
    config.init()

    for client in ("/usr/bin/supertuxkart", "/usr/bin/steam", "/usr/bin/glxgears"):
        print(
            client,
            "whitelisted" if config.is_client_whitelisted(client) else "not whitelisted",
            "blacklisted" if config.is_client_blacklisted(client) else "not blacklisted",
        )
    print("Reaper every", config.get_reaper_thread_frequency(), "seconds")
    print("Start scripts:", config.get_start_scripts())
    print("End scripts:", config.get_end_scripts())

    config.reload()
    config.destroy()
