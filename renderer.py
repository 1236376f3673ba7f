import pygame


def fit_rect(src_w: float, src_h: float, box: pygame.Rect) -> pygame.Rect:
    """Largest rect with the src aspect that fits centred inside *box*."""
    scale = min(box.width / src_w, box.height / src_h)
    w, h = int(src_w * scale), int(src_h * scale)
    return pygame.Rect(box.centerx - w // 2, box.centery - h // 2, w, h)


def render_frame(screen: pygame.Surface, frame, sar: float, box: pygame.Rect):
    """
    Scale and letter-/pillar-box a raw RGB frame into `box` on `screen`.
    """
    surf = pygame.image.frombuffer(frame, frame.shape[1::-1], "RGB")
    vw, vh = surf.get_size()
    dest = fit_rect(vw * sar, vh, box)
    screen.fill((0, 0, 0), box)
    screen.blit(pygame.transform.scale(surf, dest.size), dest.topleft)


def render_cover(screen: pygame.Surface, image: pygame.Surface, box: pygame.Rect):
    """Fill `box` with `image`, cropping the overflow (thumbnail tiles)."""
    iw, ih = image.get_size()
    scale = max(box.width / iw, box.height / ih)
    scaled = pygame.transform.scale(image, (int(iw * scale) + 1, int(ih * scale) + 1))
    sx = (scaled.get_width() - box.width) // 2
    sy = (scaled.get_height() - box.height) // 2
    screen.blit(scaled, box.topleft, pygame.Rect(sx, sy, box.width, box.height))
